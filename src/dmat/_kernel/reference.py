"""Reference kernel written with plain numpy operations.

Same contract as the BLAS kernel; used when BLAS is unwanted and to
cross-check results in tests.
"""

from typing import Tuple

import numpy as np


__all__ = ['NumpyKernel']


class NumpyKernel:
    """numpy implementation of gemm, scal and axpy."""

    name = 'numpy'

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
        """Compute ``out = alpha * op(A) @ op(B) + beta * out``."""
        op_a = a.reshape(a_shape)
        op_b = b.reshape(b_shape)
        if trans_a:
            op_a = op_a.T
        if trans_b:
            op_b = op_b.T
        product = np.matmul(op_a, op_b)
        if alpha != 1.0:
            product *= alpha
        c = out.reshape(product.shape)
        if beta:
            c *= beta
            c += product
        else:
            np.copyto(c, product)

    def scal(self, alpha: float, x: np.ndarray) -> None:
        x *= alpha

    def axpy(self, alpha: float, x: np.ndarray, y: np.ndarray) -> None:
        if alpha == 1.0:
            y += x
        elif alpha == -1.0:
            y -= x
        else:
            y += alpha * x

    def __repr__(self) -> str:
        return "NumpyKernel()"
