"""Ownership and Buffer Lifetime.

Every matrix buffer carries an ownership tag fixed at construction:

    - BORROWED: The caller's buffer is used in place. The caller keeps
      lifetime responsibility; the matrix must not outlive it.
    - OWNED: The caller handed the buffer over and gave it up. The matrix
      releases it.
    - COPIED: The matrix allocated the buffer itself and releases it.

Safety Model:
    1. Ownership never changes after construction.
    2. ``release()`` runs its rule exactly once; later calls are no-ops.
    3. Released storage refuses further access with ReleasedError.
"""

import logging
from enum import Enum
from typing import Optional

import numpy as np

from .errors import ReleasedError

__all__ = [
    'Ownership',
    'BufferStorage',
]

logger = logging.getLogger("dmat.matrix")


# =============================================================================
# Enumerations
# =============================================================================

class Ownership(Enum):
    """Buffer ownership model.

    Attributes:
        BORROWED: Matrix references an external buffer it must not release.
                  Created by: from_buffer(..., mode=BORROWED)

        OWNED: Matrix took over an external buffer.
               Created by: from_buffer(..., mode=OWNED)

        COPIED: Matrix allocated its own buffer.
                Created by: every other constructor and every operation.

    Example:
        >>> Matrix.of_size(2, 2).ownership          # Ownership.COPIED
        >>> Matrix.from_buffer(arr, 2, 2, Ownership.BORROWED).ownership
    """
    BORROWED = 'borrowed'
    OWNED = 'owned'
    COPIED = 'copied'

    @property
    def releases_buffer(self) -> bool:
        """Whether the matrix is responsible for releasing its buffer."""
        return self is not Ownership.BORROWED


# =============================================================================
# Storage
# =============================================================================

class BufferStorage:
    """Flat float64 buffer plus its ownership tag.

    Attributes:
        _data: Buffer, or None once released.
        _ownership: Ownership fixed at construction.
        _size: Number of values, kept after release for diagnostics.
    """

    __slots__ = ('_data', '_ownership', '_size')

    def __init__(self, data: np.ndarray, ownership: Ownership = Ownership.COPIED):
        self._data: Optional[np.ndarray] = data
        self._ownership = Ownership(ownership)
        self._size = int(data.size)

    @property
    def ownership(self) -> Ownership:
        return self._ownership

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> np.ndarray:
        """Live buffer.

        Raises:
            ReleasedError: If the storage was released.
        """
        data = self._data
        if data is None:
            raise ReleasedError(
                f"{self._ownership.value} buffer of {self._size} values "
                f"was released; the matrix is no longer valid"
            )
        return data

    def release(self) -> bool:
        """Apply the release rule for this ownership mode.

        Owned and copied buffers are dropped by the matrix; borrowed
        buffers are detached and left to their real owner.

        Returns:
            True if this call released the buffer, False if it already was.
        """
        if self._data is None:
            return False
        self._data = None
        if self._ownership.releases_buffer:
            logger.debug("Released %s buffer (%d values)", self._ownership.value, self._size)
        else:
            logger.debug("Detached borrowed buffer (%d values)", self._size)
        return True

    def __repr__(self) -> str:
        state = "released" if self.is_released else "live"
        return f"BufferStorage({self._ownership.value}, size={self._size}, {state})"
