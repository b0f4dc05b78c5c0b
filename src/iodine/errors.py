"""Exceptions raised by iodine itself.

Annotation never fails; these cover the two places that touch an encoder or a
parser. Wrapped payload errors are never converted into these types.
"""

from __future__ import annotations


class IodineError(Exception):
    """Base class for failures of the library itself."""


class SerializationError(IodineError):
    """An annotated error could not be encoded as JSON."""


class ReportError(IodineError):
    """A JSON error report could not be parsed or validated."""


__all__ = ["IodineError", "SerializationError", "ReportError"]
