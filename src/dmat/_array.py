"""
Buffer Allocation and Adoption

Every matrix stores its cells in a flat, C-contiguous numpy float64 array
of exactly rows * columns values, laid out row-major. The helpers here
create such buffers, either as fresh allocations or as zero-copy views of
caller-provided memory.
"""

from typing import Any, Iterable

import numpy as np

from .errors import DimensionError

__all__ = ['DTYPE', 'empty', 'zeros', 'full', 'from_sequence', 'copy_from', 'adopt']


DTYPE = np.dtype(np.float64)


# =============================================================================
# Allocation
# =============================================================================

def empty(size: int) -> np.ndarray:
    """Allocate an uninitialized buffer."""
    return np.empty(size, dtype=DTYPE)


def zeros(size: int) -> np.ndarray:
    """Allocate a zero-filled buffer."""
    return np.zeros(size, dtype=DTYPE)


def full(size: int, value: float) -> np.ndarray:
    """Allocate a buffer with every cell set to ``value``."""
    if value == 0.0:
        return zeros(size)
    return np.full(size, value, dtype=DTYPE)


def _check_size(actual: int, size: int, what: str) -> None:
    if actual != size:
        raise DimensionError(f"{what} holds {actual} values, expected {size}")


def from_sequence(values: Iterable[Any], size: int) -> np.ndarray:
    """
    Copy a generic ordered collection of numbers into a new buffer.

    Nested sequences are flattened in row-major order, so a list of rows is
    accepted as well as a flat list.

    Raises:
        DimensionError: If the number of values differs from ``size``.
        TypeError: If the values are not numeric.
    """
    if not hasattr(values, '__len__'):
        values = list(values)
    try:
        data = np.array(values, dtype=DTYPE).reshape(-1)
    except (TypeError, ValueError) as e:
        raise TypeError(f"Cannot convert sequence to float64 values: {e}") from e
    _check_size(data.size, size, "sequence")
    return data


# =============================================================================
# Buffers
# =============================================================================

_RAW_FORMATS = ('B', 'b', 'c')
_DOUBLE_FORMATS = ('d', '<d', '=d', '@d')


def _view(buffer: Any) -> np.ndarray:
    """Return an ndarray sharing memory with ``buffer``, without copying.

    Raw byte buffers (bytearray, mmap) are reinterpreted as native doubles.
    """
    if isinstance(buffer, np.ndarray):
        return buffer
    try:
        mv = memoryview(buffer)
    except TypeError as e:
        raise TypeError(
            f"Cannot use {type(buffer).__name__} as a buffer: {e}"
        ) from e
    if mv.format not in _DOUBLE_FORMATS + _RAW_FORMATS:
        raise TypeError(
            f"Buffer must hold float64 values, got format {mv.format!r}"
        )
    if not mv.c_contiguous:
        raise TypeError("Buffer must be C-contiguous")
    if mv.nbytes % DTYPE.itemsize:
        raise TypeError(f"Buffer of {mv.nbytes} bytes is not a whole number of float64 values")
    return np.frombuffer(mv, dtype=DTYPE)


def copy_from(buffer: Any, size: int) -> np.ndarray:
    """
    Copy ``size`` values from ``buffer`` into a new buffer.

    Accepts numpy arrays of any numeric dtype, buffer-protocol objects
    holding float64 values, and generic sequences.
    """
    if isinstance(buffer, np.ndarray):
        _check_size(buffer.size, size, "buffer")
        return np.array(buffer, dtype=DTYPE, order='C').reshape(-1)
    try:
        source = _view(buffer)
    except TypeError:
        return from_sequence(buffer, size)
    _check_size(source.size, size, "buffer")
    return source.copy()


def adopt(buffer: Any, size: int) -> np.ndarray:
    """
    Adopt ``buffer`` as matrix storage without copying.

    WARNING: The returned array aliases the caller's memory. Writes through
    the matrix are visible to the caller and vice versa.

    Args:
        buffer: C-contiguous float64 ndarray (any shape), or a writable
            buffer-protocol object of doubles (bytearray, array('d'), ...).
        size: Required number of values.

    Returns:
        Flat float64 view of ``buffer``.

    Raises:
        TypeError: If the buffer cannot be used without a copy.
        DimensionError: If the buffer does not hold exactly ``size`` values.
    """
    data = _view(buffer)
    if data.dtype != DTYPE:
        raise TypeError(
            f"Cannot adopt {data.dtype} buffer without copying; float64 required"
        )
    if not data.flags.c_contiguous:
        raise TypeError("Cannot adopt a non-contiguous buffer without copying")
    if not data.flags.writeable:
        raise TypeError("Cannot adopt a read-only buffer")
    _check_size(data.size, size, "buffer")
    return data.reshape(-1)
