"""
Numeric kernels for dense matrix operations.

Each kernel is a stateless object operating on flat row-major float64
buffers:

    gemm(a, a_shape, b, b_shape, out, alpha, beta, trans_a, trans_b)
        out = alpha * op(A) @ op(B) + beta * out
    scal(alpha, x)
        x *= alpha
    axpy(alpha, x, y)
        y += alpha * x

Kernels write only the designated output buffer.
"""

from .loader import get_kernel, clear_cache
from .reference import NumpyKernel

__all__ = ['get_kernel', 'clear_cache', 'NumpyKernel']
