"""
Error handling for dmat.

Every failure raised by the library is a ``MatrixError`` carrying an integer
code. Each concrete error also derives from the matching builtin exception,
so callers may catch ``IndexError`` or ``ValueError`` directly.
"""

from __future__ import annotations

import numbers
from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

DMAT_OK = 0

# General errors (1-9)
DMAT_ERROR_UNKNOWN = 1
DMAT_ERROR_INTERNAL = 2

# Argument errors (10-19)
DMAT_ERROR_INVALID_ARGUMENT = 10
DMAT_ERROR_DIMENSION_MISMATCH = 11
DMAT_ERROR_INDEX_OUT_OF_BOUNDS = 14

# I/O errors (30-39)
DMAT_ERROR_READ_ERROR = 33
DMAT_ERROR_BUFFER_NOT_FOUND = 36

# Feature errors (40-49)
DMAT_ERROR_FEATURE_UNAVAILABLE = 41


_ERROR_MESSAGES = {
    DMAT_OK: "Success",
    DMAT_ERROR_UNKNOWN: "Unknown error",
    DMAT_ERROR_INTERNAL: "Internal error",
    DMAT_ERROR_INVALID_ARGUMENT: "Invalid argument",
    DMAT_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    DMAT_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of bounds",
    DMAT_ERROR_READ_ERROR: "Malformed matrix data",
    DMAT_ERROR_BUFFER_NOT_FOUND: "Matrix buffer has been released",
    DMAT_ERROR_FEATURE_UNAVAILABLE: "Feature unavailable",
}


# =============================================================================
# Exception Classes
# =============================================================================

class MatrixError(Exception):
    """
    Base exception for all dmat errors.

    Attributes:
        code: Numeric error code (one of the ``DMAT_ERROR_*`` constants)
        message: Human readable message
    """

    OK = DMAT_OK
    ERROR_UNKNOWN = DMAT_ERROR_UNKNOWN
    ERROR_INTERNAL = DMAT_ERROR_INTERNAL
    ERROR_INVALID_ARGUMENT = DMAT_ERROR_INVALID_ARGUMENT
    ERROR_DIMENSION_MISMATCH = DMAT_ERROR_DIMENSION_MISMATCH
    ERROR_INDEX_OUT_OF_BOUNDS = DMAT_ERROR_INDEX_OUT_OF_BOUNDS
    ERROR_READ_ERROR = DMAT_ERROR_READ_ERROR
    ERROR_BUFFER_NOT_FOUND = DMAT_ERROR_BUFFER_NOT_FOUND
    ERROR_FEATURE_UNAVAILABLE = DMAT_ERROR_FEATURE_UNAVAILABLE

    default_code = DMAT_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(f"dmat error {code}: {message}")

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "MatrixError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(msg, code)


class DimensionError(MatrixError, ValueError):
    """Operand shapes are incompatible, or a dimension is not positive."""
    default_code = DMAT_ERROR_DIMENSION_MISMATCH


class BoundsError(MatrixError, IndexError):
    """A row or column index lies outside the matrix."""
    default_code = DMAT_ERROR_INDEX_OUT_OF_BOUNDS


class FormatError(MatrixError, ValueError):
    """Encoded matrix data is structurally inconsistent."""
    default_code = DMAT_ERROR_READ_ERROR


class ReleasedError(MatrixError, RuntimeError):
    """The matrix was used after its buffer was released."""
    default_code = DMAT_ERROR_BUFFER_NOT_FOUND


class KernelUnavailableError(MatrixError, RuntimeError):
    """The requested numeric kernel backend cannot be loaded."""
    default_code = DMAT_ERROR_FEATURE_UNAVAILABLE


# =============================================================================
# Checking Functions
# =============================================================================

def check_positive_dims(rows, columns, context: str = "") -> None:
    """
    Raise DimensionError unless both dimensions are positive integers.

    Booleans are rejected even though they are ``int`` subclasses.
    """
    for name, value in (("rows", rows), ("columns", columns)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
            msg = f"{name} must be a positive integer, got {value!r}"
            raise DimensionError(f"{context}: {msg}" if context else msg)


def check_same_shape(a, b, context: str = "") -> None:
    """Raise DimensionError unless ``a`` and ``b`` have identical shapes."""
    if a.rows != b.rows or a.columns != b.columns:
        msg = (f"shape mismatch {a.rows}x{a.columns} "
               f"vs {b.rows}x{b.columns}")
        raise DimensionError(f"{context}: {msg}" if context else msg)


__all__ = [
    "DMAT_OK",
    "DMAT_ERROR_UNKNOWN",
    "DMAT_ERROR_INTERNAL",
    "DMAT_ERROR_INVALID_ARGUMENT",
    "DMAT_ERROR_DIMENSION_MISMATCH",
    "DMAT_ERROR_INDEX_OUT_OF_BOUNDS",
    "DMAT_ERROR_READ_ERROR",
    "DMAT_ERROR_BUFFER_NOT_FOUND",
    "DMAT_ERROR_FEATURE_UNAVAILABLE",
    "MatrixError",
    "DimensionError",
    "BoundsError",
    "FormatError",
    "ReleasedError",
    "KernelUnavailableError",
    "check_positive_dims",
    "check_same_shape",
]
