"""
dmat Config - Strategy Configuration System

Selects the numeric kernel used for bulk operations and the default
precision of matrix comparisons, without adding parameters to every
operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Union
from enum import Enum
import threading


# =============================================================================
# Strategy Enumerations
# =============================================================================

class KernelBackend(Enum):
    """
    Numeric kernel used for scale, accumulate and multiply.
    """
    BLAS = "blas"      # scipy.linalg.blas (dgemm, dscal, daxpy)
    NUMPY = "numpy"    # Plain numpy reference kernel


# =============================================================================
# Configuration Classes
# =============================================================================

@dataclass
class ComputeConfig:
    """Configuration for compute operations."""
    kernel: KernelBackend = KernelBackend.BLAS


@dataclass
class CompareConfig:
    """Configuration for matrix comparison."""
    precision: int = 10            # Decimal digits used by is_equal()


# =============================================================================
# Global Configuration Manager
# =============================================================================

class DmatConfig:
    """
    Global configuration manager for dmat.

    Provides thread-local configuration with context manager support.
    Configuration can be set globally or locally within a context.

    Example:
        # Global configuration
        dmat.config.compute = ComputeConfig(kernel=KernelBackend.NUMPY)

        # Local configuration (context manager)
        with dmat.config.local(compare=CompareConfig(precision=4)):
            a.is_equal(b)
        # Back to global config
    """

    _SECTIONS = ("compute", "compare")

    def __init__(self):
        self._global_compute = ComputeConfig()
        self._global_compare = CompareConfig()

        # Thread-local storage for context overrides
        self._local = threading.local()

    # -------------------------------------------------------------------------
    # Property Accessors (with thread-local override support)
    # -------------------------------------------------------------------------

    @property
    def compute(self) -> ComputeConfig:
        """Get compute configuration."""
        if getattr(self._local, "compute", None) is not None:
            return self._local.compute
        return self._global_compute

    @compute.setter
    def compute(self, value: ComputeConfig):
        """Set global compute configuration."""
        self._global_compute = value

    @property
    def compare(self) -> CompareConfig:
        """Get compare configuration."""
        if getattr(self._local, "compare", None) is not None:
            return self._local.compare
        return self._global_compare

    @compare.setter
    def compare(self, value: CompareConfig):
        """Set global compare configuration."""
        self._global_compare = value

    # -------------------------------------------------------------------------
    # Convenience Properties
    # -------------------------------------------------------------------------

    @property
    def kernel(self) -> KernelBackend:
        """Active kernel backend."""
        return self.compute.kernel

    @kernel.setter
    def kernel(self, value: Union[KernelBackend, str]):
        """Set the global kernel backend."""
        self._global_compute.kernel = KernelBackend(value)

    @property
    def precision(self) -> int:
        """Default comparison precision in decimal digits."""
        return self.compare.precision

    @precision.setter
    def precision(self, value: int):
        self._global_compare.precision = int(value)

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    def local(self, **kwargs) -> "_LocalConfigContext":
        """
        Create a local configuration context.

        Args:
            **kwargs: Configuration overrides (compute, compare)

        Returns:
            Context manager
        """
        unknown = set(kwargs) - set(self._SECTIONS)
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")
        return _LocalConfigContext(self, **kwargs)

    def _set_local(self, **kwargs):
        """Set thread-local configuration."""
        for key, value in kwargs.items():
            if value is not None:
                setattr(self._local, key, value)

    def _clear_local(self, keys: List[str]):
        """Clear thread-local configuration."""
        for key in keys:
            if hasattr(self._local, key):
                setattr(self._local, key, None)

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    def reset(self):
        """Reset all configurations to defaults."""
        self._global_compute = ComputeConfig()
        self._global_compare = CompareConfig()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "compute": {
                "kernel": self.compute.kernel.value,
            },
            "compare": {
                "precision": self.compare.precision,
            },
        }

    def __repr__(self) -> str:
        return f"DmatConfig({self.to_dict()})"


class _LocalConfigContext:
    """Context manager for local configuration override."""

    def __init__(self, config: DmatConfig, **kwargs):
        self._config = config
        self._kwargs = kwargs
        self._keys = list(kwargs.keys())

    def __enter__(self):
        self._config._set_local(**self._kwargs)
        return self._config

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._config._clear_local(self._keys)
        return False


# =============================================================================
# Global Instance
# =============================================================================

config = DmatConfig()


# =============================================================================
# Convenience Functions
# =============================================================================

def get_config() -> DmatConfig:
    """Get the global configuration instance."""
    return config


def set_kernel(backend: Union[KernelBackend, str] = KernelBackend.BLAS):
    """
    Select the kernel backend globally.

    Args:
        backend: KernelBackend member or its value ("blas", "numpy")
    """
    config.compute = ComputeConfig(kernel=KernelBackend(backend))


def set_precision(precision: int = 10):
    """Set the default number of decimal digits used by is_equal()."""
    config.compare = CompareConfig(precision=int(precision))


__all__ = [
    "KernelBackend",
    "ComputeConfig",
    "CompareConfig",
    "DmatConfig",
    "config",
    "get_config",
    "set_kernel",
    "set_precision",
]
