"""Unit tests for JSON and human-readable rendering of annotated errors."""

from __future__ import annotations

import json
from typing import Any

import pytest
from pydantic_core import PydanticSerializationError

from iodine.core.annotated import new
from iodine.core.capture import CallSite
from iodine.core.entry import StackEntry
from iodine.core.render import ErrorReport, format_data, load_report
from iodine.core.settings import load_settings
from iodine.errors import ReportError, SerializationError


class _DetailedError(Exception):
    """Payload with internal state that must not leak into the JSON document."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.secret_internal = "do-not-emit"


def _sample(entries: int = 3) -> Any:
    err = new(_DetailedError("upload failed"), {"bucket": "photos"}, location=CallSite("a.py", 1))
    for i in range(1, entries):
        err.annotate({"layer": str(i)}, location=CallSite("b.py", i + 1))
    return err


def test_emit_json_shape() -> None:
    """The document has ErrorMessage and Stack with wire field names only."""
    err = _sample()
    payload = json.loads(err.emit_json())

    assert set(payload) == {"ErrorMessage", "Stack"}
    assert payload["ErrorMessage"] == "upload failed"
    assert len(payload["Stack"]) == len(err.stack) == 3
    first = payload["Stack"][0]
    assert set(first) == {"Host", "File", "Line", "Data"}
    assert (first["File"], first["Line"], first["Data"]) == ("a.py", 1, {"bucket": "photos"})
    assert b"do-not-emit" not in err.emit_json()
    assert b"EmbeddedError" not in err.emit_json()


def test_emit_json_indent_from_settings(monkeypatch: Any) -> None:
    """`IODINE_JSON_INDENT` switches to pretty-printed output."""
    monkeypatch.setenv("IODINE_JSON_INDENT", "2")
    load_settings.cache_clear()
    out = _sample(1).emit_json()
    assert out.startswith(b"{\n  ")


def test_emit_json_wraps_encoder_failures() -> None:
    """Encoder errors surface as `SerializationError` chained to the cause."""
    # model_construct skips validation, so a non-string value reaches the encoder.
    entry = StackEntry.model_construct(host="h", file="f.py", line=1, data={"k": object()})
    report = ErrorReport.model_construct(error_message="x", stack=[entry])
    with pytest.raises(SerializationError) as info:
        report.emit_json()
    assert isinstance(info.value.__cause__, PydanticSerializationError)


def test_emit_human_readable_lines() -> None:
    """One message line plus one indexed line per entry, oldest first."""
    err = _sample()
    text = err.emit_human_readable()
    lines = text.splitlines()

    assert text.endswith("\n")
    assert len(lines) == len(err.stack) + 1
    assert lines[0] == "upload failed"
    for i, line in enumerate(lines[1:]):
        assert line.startswith(f"- {i} ")
    host = err.stack[0].host
    assert lines[1] == f"- 0 {host}:a.py:1 map[bucket:photos]"
    assert lines[2] == f"- 1 {host}:b.py:2 map[layer:1]"


def test_format_data_sorted_and_empty() -> None:
    """Mappings render with sorted keys; empty ones as `map[]`."""
    assert format_data({}) == "map[]"
    assert format_data({"z": "1", "a": "2"}) == "map[a:2 z:1]"


def test_load_report_round_trip_renders_identically() -> None:
    """A parsed document renders the same text as the live error."""
    err = _sample()
    report = load_report(err.emit_json())
    assert report.error_message == "upload failed"
    assert len(report.stack) == 3
    assert all(isinstance(e, StackEntry) for e in report.stack)
    assert report.emit_human_readable() == err.emit_human_readable()


@pytest.mark.parametrize(  # type: ignore[misc]
    "raw",
    [b"not json", b'{"Stack": []}', '{"ErrorMessage": "x", "Stack": [{"Line": "nope"}]}'],
)
def test_load_report_rejects_malformed(raw: bytes | str) -> None:
    """Malformed documents raise `ReportError`."""
    with pytest.raises(ReportError):
        load_report(raw)


def test_multiline_message_and_data_stay_on_one_line_each() -> None:
    """Line breaks in messages and values are escaped, keeping len(stack) + 1 lines."""
    with pytest.raises(ReportError) as info:
        load_report(b'{"Stack": []}')
    assert "\n" in str(info.value)

    err = new(info.value, {"note": "first\r\nsecond"}, location=CallSite("a.py", 1))
    lines = err.emit_human_readable().splitlines()

    assert len(lines) == len(err.stack) + 1 == 2
    assert "\\n" in lines[0]
    assert lines[1].endswith("map[note:first\\r\\nsecond]")
    # The JSON document keeps the original text.
    assert load_report(err.emit_json()).error_message == str(info.value)
