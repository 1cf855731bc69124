"""Kernel loader with lazy initialization.

Kernels are created on first use and cached per backend. The active
backend comes from ``dmat.config.compute.kernel``.
"""

import logging
from typing import Dict, Optional, Union

from .._config import KernelBackend, config
from ..errors import KernelUnavailableError


__all__ = ['get_kernel', 'clear_cache']

logger = logging.getLogger("dmat.kernel")

# Global kernel cache
_kernel_cache: Dict[KernelBackend, object] = {}


def _load(backend: KernelBackend):
    if backend is KernelBackend.BLAS:
        try:
            from .blas import BlasKernel
        except ImportError as e:
            raise KernelUnavailableError(
                f"Cannot load scipy BLAS kernel: {e}. "
                f"Install scipy or select KernelBackend.NUMPY."
            ) from e
        return BlasKernel()
    from .reference import NumpyKernel
    return NumpyKernel()


def get_kernel(backend: Optional[Union[KernelBackend, str]] = None):
    """Get kernel handle with lazy initialization.

    Args:
        backend: Force a specific backend, or None for the configured one.

    Returns:
        Kernel object exposing gemm, scal and axpy.

    Raises:
        KernelUnavailableError: If the backend cannot be loaded.

    Example:
        >>> kernel = get_kernel()
        >>> kernel.scal(2.0, buffer)
    """
    if backend is None:
        backend = config.compute.kernel
    else:
        try:
            backend = KernelBackend(backend)
        except ValueError:
            raise KernelUnavailableError(f"Unknown kernel backend: {backend!r}")

    kernel = _kernel_cache.get(backend)
    if kernel is None:
        kernel = _load(backend)
        _kernel_cache[backend] = kernel
        logger.debug(f"Loaded {backend.value} kernel: {kernel!r}")
    return kernel


def clear_cache() -> None:
    """Drop cached kernels so the next call reloads them."""
    _kernel_cache.clear()
