"""
Stack entry definition.

A :class:`StackEntry` is the immutable record of one wrap or annotate event:
where it happened (host, file, line) and the diagnostic context in force at
that moment.

Design Notes
------------
- **Immutability**: the model is frozen and ``data`` is copied on validation,
  so neither later context changes nor the dict the caller passed in can alter
  a recorded entry.
- **Wire names**: fields serialize as ``Host``, ``File``, ``Line`` and ``Data``
  to keep the JSON document compatible with existing log pipelines. Python
  code uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StackEntry(BaseModel):
    """One captured call site plus its context snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = Field(default="", alias="Host", description="Host name at capture time")
    file: str = Field(default="", alias="File", description="Source file of the call site")
    line: int = Field(default=0, ge=0, alias="Line", description="Line of the call site")
    data: dict[str, str] = Field(
        default_factory=dict,
        alias="Data",
        description="Context snapshot merged with caller-supplied values",
    )

    @field_validator("data", mode="before")
    @classmethod
    def _copy_data(cls, v: Any) -> Any:
        """Detach the mapping from whatever the caller still holds."""
        if v is None:
            return {}
        return dict(v) if hasattr(v, "items") else v

    @property
    def location(self) -> str:
        """Return ``host:file:line`` as shown in human-readable reports."""
        return f"{self.host}:{self.file}:{self.line}"


__all__ = ["StackEntry"]
