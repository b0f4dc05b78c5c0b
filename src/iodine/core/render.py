"""
JSON and human-readable rendering of annotated errors.

The JSON document mirrors :class:`ErrorReport`::

    {
      "ErrorMessage": "disk quota exceeded",
      "Stack": [
        {"Host": "node-1", "File": "/srv/app/put.py", "Line": 42,
         "Data": {"bucket": "photos"}}
      ]
    }

The embedded error object is never part of the document; its message is
already in ``ErrorMessage``.

The text form is one message line followed by one line per stack entry,
oldest first::

    disk quota exceeded
    - 0 node-1:/srv/app/put.py:42 map[bucket:photos]
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_core import PydanticSerializationError

from iodine.errors import ReportError, SerializationError

from .entry import StackEntry
from .settings import load_settings


class ErrorReport(BaseModel):
    """Structured form of an annotated error, as emitted and parsed back."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error_message: str = Field(alias="ErrorMessage")
    stack: list[StackEntry] = Field(default_factory=list, alias="Stack")

    def emit_json(self, indent: int | None = None) -> bytes:
        """Encode the report; see :func:`encode_report`."""
        return encode_report(self, indent=indent)

    def emit_human_readable(self) -> str:
        """Render the report as text; see :func:`format_human_readable`."""
        return format_human_readable(self.error_message, self.stack)


# Every character str.splitlines() breaks on, mapped to its backslash escape.
_LINE_BREAKS = str.maketrans(
    {
        c: c.encode("unicode_escape").decode("ascii")
        for c in "\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029"
    }
)


def one_line(text: str) -> str:
    """Escape line breaks so ``text`` occupies a single report line."""
    return text.translate(_LINE_BREAKS)


def format_data(data: Mapping[str, str]) -> str:
    """Render a context mapping as ``map[k1:v1 k2:v2]`` with sorted keys."""
    pairs = " ".join(f"{one_line(k)}:{one_line(data[k])}" for k in sorted(data))
    return f"map[{pairs}]"


def format_human_readable(message: str, stack: Sequence[StackEntry]) -> str:
    """Return the message line plus one ``- <i> <host>:<file>:<line> <data>`` line per entry."""
    lines = [one_line(message)]
    for i, entry in enumerate(stack):
        lines.append(f"- {i} {one_line(entry.location)} {format_data(entry.data)}")
    return "\n".join(lines) + "\n"


def encode_report(report: ErrorReport, indent: int | None = None) -> bytes:
    """
    Serialize ``report`` to UTF-8 JSON bytes using the wire field names.

    ``indent`` defaults to the ``IODINE_JSON_INDENT`` setting.

    Raises
    ------
    SerializationError
        If the encoder rejects a value.
    """
    if indent is None:
        indent = load_settings().json_indent
    try:
        return report.model_dump_json(by_alias=True, indent=indent).encode("utf-8")
    except PydanticSerializationError as exc:
        raise SerializationError(f"Could not encode error report: {exc}") from exc


def load_report(raw: bytes | str) -> ErrorReport:
    """
    Parse a JSON document produced by ``emit_json`` back into an :class:`ErrorReport`.

    Raises
    ------
    ReportError
        If ``raw`` is not valid JSON or does not match the report shape.
    """
    try:
        return ErrorReport.model_validate_json(raw)
    except ValidationError as exc:
        raise ReportError(f"Invalid error report: {exc}") from exc


__all__ = [
    "ErrorReport",
    "format_data",
    "format_human_readable",
    "encode_report",
    "load_report",
]
