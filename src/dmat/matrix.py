"""
Matrix - dense, fixed-size float64 matrix.

A Matrix is a rows x columns grid of doubles stored in one flat buffer,
row-major: cell (i, j) lives at index ``i * columns + j``. Dimensions never
change after construction.

Buffer ownership is chosen once, at construction (see ``Ownership``):

    # Copies the data (default)
    m = Matrix.from_buffer(values, 2, 3)

    # Uses the caller's array in place; caller keeps it alive
    m = Matrix.from_buffer(arr, 2, 3, mode=Ownership.BORROWED)

Operations come in pairs. ``by_*`` methods return a new matrix and leave
their operands untouched; the bare verbs (``add``, ``negate``, ...) mutate
the receiver. Shapes are validated before any buffer is written, so a
failing call never leaves a half-updated matrix behind.
"""

from __future__ import annotations

import numbers
from typing import Any, Iterable, List, Optional, Tuple, Union

import numpy as np

from . import _array
from ._config import config
from ._kernel import get_kernel
from ._ownership import BufferStorage, Ownership
from .errors import (
    BoundsError,
    DimensionError,
    check_positive_dims,
    check_same_shape,
)


__all__ = ['Matrix']


def _diagonal_slice(rows: int, columns: int) -> slice:
    """Positions of cells (i, i), i < min(rows, columns), in a row-major buffer."""
    n = min(rows, columns)
    return slice(0, n * (columns + 1), columns + 1)


def _sequential_sum(values: np.ndarray) -> float:
    # cumsum accumulates strictly left to right; np.sum reduces pairwise
    return float(np.cumsum(values)[-1])


def _sequential_product(values: np.ndarray) -> float:
    return float(np.cumprod(values)[-1])


class Matrix:
    """
    Dense float64 matrix with fixed dimensions.

    Attributes:
        rows: Number of rows (> 0).
        columns: Number of columns (> 0).
        ownership: Buffer ownership mode.

    Lifetime:
        ``release()`` ends the matrix lifetime and applies its ownership
        release rule exactly once. It runs automatically on garbage
        collection and on leaving a ``with`` block. Using a released matrix
        raises ReleasedError.

    Example:
        >>> a = Matrix.of_size(2, 2, 0.0, diagonal=[1.0, 4.0])
        >>> a.trace()
        5.0
        >>> b = a.by_multiplying_right(Matrix.identity(2, 2))
        >>> b.is_equal(a)
        True
    """

    __slots__ = ("_rows", "_columns", "_storage", "__weakref__")

    def __init__(
        self,
        data: np.ndarray,
        rows: int,
        columns: int,
        ownership: Ownership = Ownership.COPIED,
    ):
        """
        Initialize from a prepared buffer.

        Internal constructor - use the factory classmethods instead.

        Args:
            data: Flat float64 ndarray of exactly rows * columns values
            rows: Number of rows
            columns: Number of columns
            ownership: Ownership tag of ``data``
        """
        check_positive_dims(rows, columns, "Matrix")
        if data.size != rows * columns:
            raise DimensionError(
                f"Matrix: buffer holds {data.size} values, "
                f"expected {rows * columns}"
            )
        self._rows = int(rows)
        self._columns = int(columns)
        self._storage = BufferStorage(data, ownership)

    def __del__(self):
        storage = getattr(self, "_storage", None)
        if storage is not None:
            storage.release()

    def __enter__(self) -> "Matrix":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def release(self) -> None:
        """
        End the matrix lifetime.

        Owned and copied buffers are dropped; borrowed buffers are detached
        and left to their owner. Calling it again has no effect.
        """
        self._storage.release()

    @property
    def _data(self) -> np.ndarray:
        return self._storage.data

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def of_size(
        cls,
        rows: int,
        columns: int,
        value: float = 0.0,
        diagonal: Optional[Iterable[float]] = None,
    ) -> "Matrix":
        """
        Create a rows x columns matrix with every cell set to ``value``.

        Args:
            rows: Number of rows
            columns: Number of columns
            value: Fill value (default 0.0)
            diagonal: Optional values for cells (i, i), i < min(rows, columns).
                Extra values are ignored.

        Raises:
            DimensionError: If a dimension is not positive, or ``diagonal``
                holds fewer than min(rows, columns) values.
        """
        check_positive_dims(rows, columns, "of_size")
        diag = None
        if diagonal is not None:
            n = min(rows, columns)
            if not hasattr(diagonal, '__len__'):
                diagonal = list(diagonal)
            diag = np.asarray(diagonal, dtype=np.float64).reshape(-1)
            if diag.size < n:
                raise DimensionError(
                    f"of_size: diagonal holds {diag.size} values, needs {n}"
                )
            diag = diag[:n]

        data = _array.full(rows * columns, value)
        if diag is not None:
            data[_diagonal_slice(rows, columns)] = diag
        return cls(data, rows, columns)

    @classmethod
    def identity(cls, rows: int, columns: int) -> "Matrix":
        """1.0 on the diagonal, 0.0 elsewhere. Rectangular shapes are allowed."""
        check_positive_dims(rows, columns, "identity")
        data = _array.zeros(rows * columns)
        data[_diagonal_slice(rows, columns)] = 1.0
        return cls(data, rows, columns)

    @classmethod
    def from_buffer(
        cls,
        buffer: Any,
        rows: int,
        columns: int,
        mode: Union[Ownership, str] = Ownership.COPIED,
    ) -> "Matrix":
        """
        Create a matrix over a row-major buffer of rows * columns doubles.

        Args:
            buffer: numpy array or buffer-protocol object. COPIED mode also
                accepts generic sequences and non-float64 arrays.
            rows: Number of rows
            columns: Number of columns
            mode: BORROWED and OWNED adopt ``buffer`` without copying;
                COPIED copies it into a new buffer.

        Raises:
            DimensionError: If a dimension is not positive, or the buffer
                size differs from rows * columns.
            TypeError: If BORROWED/OWNED ``buffer`` cannot be used in place
                (wrong dtype, non-contiguous, read-only, or not a buffer).

        WARNING:
            A BORROWED matrix aliases the caller's memory and must not be
            used after the caller releases the buffer. This is not checked.
        """
        check_positive_dims(rows, columns, "from_buffer")
        mode = Ownership(mode)
        size = rows * columns
        if mode is Ownership.COPIED:
            data = _array.copy_from(buffer, size)
        else:
            data = _array.adopt(buffer, size)
        return cls(data, rows, columns, mode)

    @classmethod
    def from_sequence(
        cls,
        values: Iterable[float],
        rows: int,
        columns: int,
    ) -> "Matrix":
        """
        Copy a generic ordered collection of numbers, in row-major order.

        Raises:
            DimensionError: If a dimension is not positive or the number of
                values differs from rows * columns.
        """
        check_positive_dims(rows, columns, "from_sequence")
        data = _array.from_sequence(values, rows * columns)
        return cls(data, rows, columns)

    @classmethod
    def from_matrix(cls, other: "Matrix") -> "Matrix":
        """Deep copy of ``other``."""
        return cls(other._data.copy(), other._rows, other._columns)

    def copy(self) -> "Matrix":
        """Deep copy; the copy is always COPIED."""
        return Matrix.from_matrix(self)

    def __copy__(self) -> "Matrix":
        return self.copy()

    def __deepcopy__(self, memo) -> "Matrix":
        return self.copy()

    def __reduce__(self):
        from .io import decode, encode
        return (decode, (encode(self),))

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def shape(self) -> Tuple[int, int]:
        """(rows, columns)."""
        return (self._rows, self._columns)

    @property
    def ownership(self) -> Ownership:
        return self._storage.ownership

    @property
    def is_released(self) -> bool:
        return self._storage.is_released

    @property
    def count(self) -> int:
        """Number of cells (rows * columns)."""
        return self._rows * self._columns

    @property
    def is_square(self) -> bool:
        return self._rows == self._columns

    @property
    def array(self) -> np.ndarray:
        """
        The live buffer (no copy).

        Writes through this array change the matrix. The array is only
        meaningful while the matrix is alive.
        """
        return self._data

    @property
    def array_copy(self) -> np.ndarray:
        """Independent snapshot of the buffer."""
        return self._data.copy()

    @property
    def values(self) -> Tuple[float, ...]:
        """Read-only row-major sequence of the cell values."""
        return tuple(self._data.tolist())

    def to_list(self) -> List[float]:
        """Row-major list of the cell values."""
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        """Independent rows x columns ndarray."""
        return self._data.reshape(self._rows, self._columns).copy()

    @property
    def diagonal(self) -> "Matrix":
        """
        Column matrix of cells (i, i), i < min(rows, columns).

        Extracted on every access, O(min(rows, columns)); store the result
        when it is needed more than once.
        """
        diag = self._data[_diagonal_slice(self._rows, self._columns)].copy()
        return Matrix(diag, diag.size, 1)

    # =========================================================================
    # Access & Validation
    # =========================================================================

    def check_bounds(self, row: int, column: int) -> None:
        """
        Raise BoundsError unless 0 <= row < rows and 0 <= column < columns.

        Negative indexes are out of bounds; there is no wrap-around.
        """
        if not (0 <= row < self._rows and 0 <= column < self._columns):
            raise BoundsError(
                f"index ({row}, {column}) out of bounds for "
                f"{self._rows}x{self._columns} matrix"
            )

    def check_square(self) -> None:
        """Raise DimensionError unless the matrix is square."""
        if self._rows != self._columns:
            raise DimensionError(
                f"square matrix required, got {self._rows}x{self._columns}"
            )

    def value_at(self, row: int, column: int) -> float:
        self.check_bounds(row, column)
        return float(self._data[row * self._columns + column])

    def set_value(self, row: int, column: int, value: float) -> None:
        self.check_bounds(row, column)
        self._data[row * self._columns + column] = value

    def __getitem__(self, index: Tuple[int, int]) -> float:
        row, column = index
        return self.value_at(row, column)

    def __setitem__(self, index: Tuple[int, int], value: float) -> None:
        row, column = index
        self.set_value(row, column, value)

    # =========================================================================
    # Reductions
    # =========================================================================

    def sum(self) -> float:
        """Sum of all cells, accumulated in row-major order."""
        return _sequential_sum(self._data)

    def product(self) -> float:
        """Product of all cells, accumulated in row-major order."""
        return _sequential_product(self._data)

    def trace(self) -> float:
        """
        Sum of the diagonal.

        Raises:
            DimensionError: If the matrix is not square.
        """
        self.check_square()
        return _sequential_sum(self._data[_diagonal_slice(self._rows, self._columns)])

    def dot_with(self, other: "Matrix") -> float:
        """
        Sum of the elementwise product with ``other``.

        Raises:
            DimensionError: If the shapes differ.
        """
        check_same_shape(self, other, "dot_with")
        return _sequential_sum(self._data * other._data)

    # =========================================================================
    # Additive Operations
    # =========================================================================

    def by_adding(self, other: "Matrix") -> "Matrix":
        """Return self + other."""
        check_same_shape(self, other, "by_adding")
        result = self.copy()
        get_kernel().axpy(1.0, other._data, result._data)
        return result

    def add(self, other: "Matrix") -> None:
        """self += other, in place."""
        check_same_shape(self, other, "add")
        get_kernel().axpy(1.0, other._data, self._data)

    def by_subtracting(self, other: "Matrix") -> "Matrix":
        """Return self - other."""
        check_same_shape(self, other, "by_subtracting")
        result = self.copy()
        get_kernel().axpy(-1.0, other._data, result._data)
        return result

    def subtract(self, other: "Matrix") -> None:
        """self -= other, in place."""
        check_same_shape(self, other, "subtract")
        get_kernel().axpy(-1.0, other._data, self._data)

    # =========================================================================
    # Scalar Operations
    # =========================================================================

    def by_multiplying_scalar(
        self,
        factor: float,
        addend: Optional["Matrix"] = None,
    ) -> "Matrix":
        """
        Return factor * self, plus ``addend`` when given.

        Raises:
            DimensionError: If ``addend`` has a different shape.
        """
        if addend is not None:
            check_same_shape(self, addend, "by_multiplying_scalar")
            result = addend.copy()
            get_kernel().axpy(factor, self._data, result._data)
            return result
        result = self.copy()
        get_kernel().scal(factor, result._data)
        return result

    def multiply_scalar(self, factor: float) -> None:
        """self *= factor, in place."""
        get_kernel().scal(factor, self._data)

    def by_negating(self) -> "Matrix":
        return self.by_multiplying_scalar(-1.0)

    def negate(self) -> None:
        self.multiply_scalar(-1.0)

    # =========================================================================
    # Elementwise Operations
    # =========================================================================

    def by_element_wise_multiplying(self, other: "Matrix") -> "Matrix":
        """Return the elementwise (Hadamard) product."""
        check_same_shape(self, other, "by_element_wise_multiplying")
        data = np.multiply(self._data, other._data)
        return Matrix(data, self._rows, self._columns)

    def element_wise_multiply(self, other: "Matrix") -> None:
        """Elementwise (Hadamard) product, in place."""
        check_same_shape(self, other, "element_wise_multiply")
        np.multiply(self._data, other._data, out=self._data)

    # =========================================================================
    # Transposition & Multiplication
    # =========================================================================

    def by_transposing(self) -> "Matrix":
        """Return the columns x rows transpose."""
        data = self._data.reshape(self._rows, self._columns).T.flatten()
        return Matrix(data, self._columns, self._rows)

    @property
    def T(self) -> "Matrix":
        return self.by_transposing()

    def by_multiplying_right(
        self,
        other: "Matrix",
        transpose: bool = False,
        addend: Optional["Matrix"] = None,
        factor: float = 1.0,
    ) -> "Matrix":
        """
        Matrix product with ``other`` on the right.

        Computes ``factor * (self @ other) + addend``. With ``transpose``
        the product is transposed before ``addend`` is added; it is computed
        directly as other^T @ self^T, without building either transpose.

        Args:
            other: Right operand, other.rows == self.columns
            transpose: Transpose the product
            addend: Matrix added to the (scaled) product; must have the
                result shape
            factor: Scale applied to the product

        Returns:
            New rows x other.columns matrix (other.columns x rows if
            ``transpose``).

        Raises:
            DimensionError: If the operands or ``addend`` do not fit.
        """
        if self._columns != other._rows:
            raise DimensionError(
                f"by_multiplying_right: cannot multiply {self._rows}x{self._columns} "
                f"by {other._rows}x{other._columns}"
            )
        if transpose:
            m, n = other._columns, self._rows
        else:
            m, n = self._rows, other._columns
        if addend is not None and addend.shape != (m, n):
            raise DimensionError(
                f"by_multiplying_right: addend is {addend._rows}x{addend._columns}, "
                f"result is {m}x{n}"
            )

        if addend is None:
            out, beta = _array.empty(m * n), 0.0
        else:
            out, beta = addend.array_copy, 1.0

        kernel = get_kernel()
        if transpose:
            kernel.gemm(other._data, other.shape, self._data, self.shape, out,
                        alpha=factor, beta=beta, trans_a=True, trans_b=True)
        else:
            kernel.gemm(self._data, self.shape, other._data, other.shape, out,
                        alpha=factor, beta=beta)
        return Matrix(out, m, n)

    def by_transposing_and_multiplying_right(self, other: "Matrix") -> "Matrix":
        """
        Return self^T @ other without building self^T.

        Raises:
            DimensionError: If self.rows != other.rows.
        """
        if self._rows != other._rows:
            raise DimensionError(
                f"by_transposing_and_multiplying_right: cannot multiply "
                f"transposed {self._rows}x{self._columns} by {other._rows}x{other._columns}"
            )
        out = _array.empty(self._columns * other._columns)
        get_kernel().gemm(self._data, self.shape, other._data, other.shape, out,
                          trans_a=True)
        return Matrix(out, self._columns, other._columns)

    def by_transposing_and_multiplying_left(self, other: "Matrix") -> "Matrix":
        """
        Return other @ self^T without building self^T.

        Raises:
            DimensionError: If other.columns != self.columns.
        """
        if other._columns != self._columns:
            raise DimensionError(
                f"by_transposing_and_multiplying_left: cannot multiply "
                f"{other._rows}x{other._columns} by transposed {self._rows}x{self._columns}"
            )
        out = _array.empty(other._rows * self._rows)
        get_kernel().gemm(other._data, other.shape, self._data, self.shape, out,
                          trans_b=True)
        return Matrix(out, other._rows, self._rows)

    # =========================================================================
    # Normalization & Comparison
    # =========================================================================

    def by_unitizing(self) -> "Matrix":
        """
        Return a copy rescaled to [0, 1] with (v - min) / (max - min).

        Only defined for vectors (a single row or column). When every value
        is equal the result is all zeros.

        Raises:
            DimensionError: If the matrix is not a vector.
        """
        if self._rows != 1 and self._columns != 1:
            raise DimensionError(
                f"by_unitizing: vector required, got {self._rows}x{self._columns}"
            )
        data = self._data
        lo = data.min()
        span = data.max() - lo
        if span == 0.0:
            out = _array.zeros(data.size)
        else:
            out = (data - lo) / span
        return Matrix(out, self._rows, self._columns)

    def is_equal(self, other: "Matrix", precision: Optional[int] = None) -> bool:
        """
        Compare cell by cell after rounding to ``precision`` decimals.

        Matrices of different shapes compare unequal; this never raises
        for a shape mismatch.

        Args:
            other: Matrix to compare with
            precision: Decimal digits, default ``config.compare.precision``
        """
        if not isinstance(other, Matrix) or self.shape != other.shape:
            return False
        if precision is None:
            precision = config.compare.precision
        return bool(np.array_equal(
            np.round(self._data, precision),
            np.round(other._data, precision),
        ))

    # =========================================================================
    # Operators
    # =========================================================================

    def __add__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.by_adding(other)

    def __iadd__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self.add(other)
        return self

    def __sub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.by_subtracting(other)

    def __isub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self.subtract(other)
        return self

    def __mul__(self, factor):
        if isinstance(factor, bool) or not isinstance(factor, numbers.Real):
            return NotImplemented
        return self.by_multiplying_scalar(float(factor))

    __rmul__ = __mul__

    def __imul__(self, factor):
        if isinstance(factor, bool) or not isinstance(factor, numbers.Real):
            return NotImplemented
        self.multiply_scalar(float(factor))
        return self

    def __matmul__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.by_multiplying_right(other)

    def __neg__(self):
        return self.by_negating()

    # =========================================================================
    # Representation
    # =========================================================================

    def __repr__(self) -> str:
        header = f"{self._rows}x{self._columns}, {self.ownership.value}"
        if self.is_released:
            return f"Matrix({header}, released)"
        return f"Matrix({header}, {self.to_numpy().tolist()})"

    def __str__(self) -> str:
        if self.is_released:
            return self.__repr__()
        lines = [f"Matrix {self._rows}x{self._columns}"]
        for row in self.to_numpy():
            lines.append("\t".join(repr(float(v)) for v in row))
        return "\n".join(lines)
