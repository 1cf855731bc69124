"""BLAS kernel backed by scipy.linalg.blas.

Buffers are flat, row-major float64 arrays. scipy hands column-major
results back from dgemm; they are copied into the row-major output buffer
in place.
"""

from typing import Tuple

import numpy as np
from scipy.linalg import blas


__all__ = ['BlasKernel']


class BlasKernel:
    """Double precision BLAS level 1/3 routines (dgemm, dscal, daxpy)."""

    name = 'blas'

    def gemm(
        self,
        a: np.ndarray,
        a_shape: Tuple[int, int],
        b: np.ndarray,
        b_shape: Tuple[int, int],
        out: np.ndarray,
        alpha: float = 1.0,
        beta: float = 0.0,
        trans_a: bool = False,
        trans_b: bool = False,
    ) -> None:
        """Compute ``out = alpha * op(A) @ op(B) + beta * out``.

        Args:
            a: Flat row-major buffer of A.
            a_shape: Stored (rows, columns) of A, before op().
            b: Flat row-major buffer of B.
            b_shape: Stored (rows, columns) of B, before op().
            out: Flat row-major output buffer of the result size.
            alpha: Product scale.
            beta: Scale of the existing ``out`` contents (0 ignores them).
            trans_a: Use A transposed.
            trans_b: Use B transposed.
        """
        m = a_shape[1] if trans_a else a_shape[0]
        n = b_shape[0] if trans_b else b_shape[1]
        c = out.reshape(m, n)
        if beta:
            result = blas.dgemm(
                alpha, a.reshape(a_shape), b.reshape(b_shape),
                beta=beta, c=c, trans_a=int(trans_a), trans_b=int(trans_b),
            )
        else:
            result = blas.dgemm(
                alpha, a.reshape(a_shape), b.reshape(b_shape),
                trans_a=int(trans_a), trans_b=int(trans_b),
            )
        np.copyto(c, result)

    def scal(self, alpha: float, x: np.ndarray) -> None:
        """Scale ``x`` in place."""
        np.copyto(x, blas.dscal(alpha, x))

    def axpy(self, alpha: float, x: np.ndarray, y: np.ndarray) -> None:
        """Compute ``y += alpha * x`` in place."""
        np.copyto(y, blas.daxpy(x, y, a=alpha))

    def __repr__(self) -> str:
        return "BlasKernel(scipy.linalg.blas)"
