"""Structured errors raised by the compatibility engine.

Two kinds are used throughout the project:

- ``ValidationError``: the input is structurally wrong (missing chart, wrong
  house count, out-of-range longitude, incomplete nakshatra). Raised before
  any computation starts.
- ``CalculationError``: an internal invariant broke while computing on
  otherwise valid input. Wraps the originating exception as ``cause``.

Both carry a machine-readable ``code`` and a human-readable ``message`` and
serialize with ``to_dict()`` into the API error envelope.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Optional


class CompatibilityError(Exception):
    """Base class for all engine errors."""

    default_code = "COMPATIBILITY_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(CompatibilityError):
    """Input is structurally invalid. Never retried."""

    default_code = "INVALID_INPUT"


class CalculationError(CompatibilityError):
    """An internal invariant broke during an otherwise valid computation."""

    default_code = "CALCULATION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.cause = cause
        if cause is not None:
            self.details.setdefault("originalError", str(cause))


def ensure_finite(value: float, what: str) -> float:
    """Return ``value`` as float, raising CalculationError on NaN/Infinity."""
    try:
        f = float(value)
    except (TypeError, ValueError) as exc:
        raise CalculationError(f"{what} is not numeric", details={"value": repr(value)}, cause=exc) from exc
    if not math.isfinite(f):
        raise CalculationError(f"{what} produced a non-finite value", details={"value": repr(value)})
    return f
