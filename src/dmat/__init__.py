"""
dmat - Dense Matrix Core

Fixed-size float64 matrices for numeric code that wants a predictable
matrix type without managing raw buffers:
- Three buffer ownership modes (borrowed, owned, copied)
- Allocating and in-place arithmetic with identical semantics
- BLAS-backed multiply, scale and accumulate (scipy.linalg.blas)
- Precision-aware equality
- Compact binary encoding

Architecture:
    ┌──────────────────────────────────────────────┐
    │   Operations: by_adding / add, gemm, ...     │
    ├──────────────────────────────────────────────┤
    │   Access & validation: value_at, checks      │
    ├──────────────────────────────────────────────┤
    │   Construction: of_size, from_buffer, ...    │
    ├──────────────────────────────────────────────┤
    │   Storage: float64 buffer + Ownership        │
    └──────────────────────────────────────────────┘

Example:
    >>> from dmat import Matrix, Ownership
    >>>
    >>> a = Matrix.from_buffer([1, 2, 3, 4, 5, 6], 2, 3)
    >>> a.by_transposing().to_numpy()
    array([[1., 4.],
           [2., 5.],
           [3., 6.]])
    >>>
    >>> # Zero-copy view of an existing array
    >>> import numpy as np
    >>> arr = np.zeros(4)
    >>> m = Matrix.from_buffer(arr, 2, 2, Ownership.BORROWED)
    >>> m.set_value(0, 0, 1.0)
    >>> float(arr[0])
    1.0
"""

__version__ = '0.1.0'

from .matrix import Matrix
from ._ownership import Ownership, BufferStorage
from ._config import (
    KernelBackend,
    ComputeConfig,
    CompareConfig,
    DmatConfig,
    config,
    get_config,
    set_kernel,
    set_precision,
)
from ._kernel import get_kernel
from .errors import (
    MatrixError,
    DimensionError,
    BoundsError,
    FormatError,
    ReleasedError,
    KernelUnavailableError,
)
from . import io
from .io import encode, decode, save, load

__all__ = [
    # Version
    '__version__',

    # Core
    'Matrix',
    'Ownership',
    'BufferStorage',

    # Configuration
    'KernelBackend',
    'ComputeConfig',
    'CompareConfig',
    'DmatConfig',
    'config',
    'get_config',
    'set_kernel',
    'set_precision',
    'get_kernel',

    # Errors
    'MatrixError',
    'DimensionError',
    'BoundsError',
    'FormatError',
    'ReleasedError',
    'KernelUnavailableError',

    # Serialization
    'io',
    'encode',
    'decode',
    'save',
    'load',
]
