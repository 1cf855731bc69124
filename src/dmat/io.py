"""
Binary encoding of matrices.

Format (little-endian):

    offset  type      content
    0       int32     rows
    4       int32     columns
    8       float64   rows * columns cell values, row-major

Decoding is the exact inverse of encoding and always produces a COPIED
matrix.
"""

from __future__ import annotations

import logging
import os
from typing import Union

import numpy as np

from .errors import FormatError
from .matrix import Matrix

__all__ = [
    'HEADER_DTYPE',
    'VALUE_DTYPE',
    'HEADER_SIZE',
    'encode',
    'decode',
    'save',
    'load',
]

logger = logging.getLogger("dmat.io")

HEADER_DTYPE = np.dtype('<i4')
VALUE_DTYPE = np.dtype('<f8')
HEADER_SIZE = 2 * HEADER_DTYPE.itemsize

_INT32_MAX = np.iinfo(HEADER_DTYPE).max


def encode(matrix: Matrix) -> bytes:
    """
    Encode ``matrix`` as header plus row-major float64 payload.

    Raises:
        FormatError: If a dimension does not fit in int32.
    """
    rows, columns = matrix.shape
    if rows > _INT32_MAX or columns > _INT32_MAX:
        raise FormatError(f"{rows}x{columns} matrix does not fit the int32 header")
    header = np.array([rows, columns], dtype=HEADER_DTYPE)
    payload = matrix.array.astype(VALUE_DTYPE, copy=False)
    return header.tobytes() + payload.tobytes()


def decode(data: Union[bytes, bytearray, memoryview]) -> Matrix:
    """
    Decode bytes produced by :func:`encode`.

    Raises:
        FormatError: If the header is truncated, a dimension is not
            positive, or the payload does not hold exactly rows * columns
            float64 values.
    """
    raw = memoryview(data).cast('B')
    if raw.nbytes < HEADER_SIZE:
        raise FormatError(
            f"truncated header: {raw.nbytes} bytes, need {HEADER_SIZE}"
        )
    rows, columns = (int(v) for v in np.frombuffer(raw[:HEADER_SIZE], dtype=HEADER_DTYPE))
    if rows <= 0 or columns <= 0:
        raise FormatError(f"invalid dimensions {rows}x{columns}")

    payload = raw[HEADER_SIZE:]
    expected = rows * columns * VALUE_DTYPE.itemsize
    if payload.nbytes != expected:
        raise FormatError(
            f"payload holds {payload.nbytes} bytes, "
            f"{rows}x{columns} matrix needs {expected}"
        )
    values = np.frombuffer(payload, dtype=VALUE_DTYPE).astype(np.float64)
    return Matrix(values, rows, columns)


def save(matrix: Matrix, path: Union[str, os.PathLike]) -> None:
    """Write ``matrix`` to ``path`` in the binary format."""
    data = encode(matrix)
    with open(path, 'wb') as f:
        f.write(data)
    logger.debug(f"Saved {matrix.rows}x{matrix.columns} matrix to {path}")


def load(path: Union[str, os.PathLike]) -> Matrix:
    """
    Read a matrix written by :func:`save`.

    Raises:
        FormatError: If the file content is malformed.
    """
    with open(path, 'rb') as f:
        data = f.read()
    matrix = decode(data)
    logger.debug(f"Loaded {matrix.rows}x{matrix.columns} matrix from {path}")
    return matrix
