"""
Tests for the configuration system.
"""

import threading

import pytest

import dmat
from dmat import (
    CompareConfig,
    ComputeConfig,
    KernelBackend,
    Matrix,
    config,
    get_config,
    set_kernel,
    set_precision,
)
from dmat._kernel import get_kernel, NumpyKernel


class TestDefaults:
    """Default configuration."""

    def test_defaults(self):
        assert config.kernel is KernelBackend.BLAS
        assert config.precision == 10
        assert get_config() is config
        assert dmat.config is config

    def test_to_dict(self):
        assert config.to_dict() == {
            "compute": {"kernel": "blas"},
            "compare": {"precision": 10},
        }
        assert "DmatConfig" in repr(config)


class TestGlobalSettings:
    """Global setters and reset."""

    def test_set_kernel(self):
        set_kernel(KernelBackend.NUMPY)
        assert config.compute.kernel is KernelBackend.NUMPY
        config.kernel = "blas"
        assert config.kernel is KernelBackend.BLAS

    def test_set_kernel_invalid(self):
        with pytest.raises(ValueError):
            set_kernel("fortran")

    def test_set_precision_changes_is_equal(self):
        a = Matrix.of_size(1, 1, 1.0)
        b = Matrix.of_size(1, 1, 1.0001)
        assert not a.is_equal(b)
        set_precision(3)
        assert a.is_equal(b)

    def test_reset(self):
        set_kernel("numpy")
        set_precision(2)
        config.reset()
        assert config.kernel is KernelBackend.BLAS
        assert config.precision == 10


class TestLocalContext:
    """Thread-local overrides."""

    def test_local_override(self):
        with config.local(compute=ComputeConfig(kernel=KernelBackend.NUMPY)):
            assert config.kernel is KernelBackend.NUMPY
            assert isinstance(get_kernel(), NumpyKernel)
        assert config.kernel is KernelBackend.BLAS

    def test_local_compare(self):
        a = Matrix.of_size(1, 1, 1.0)
        b = Matrix.of_size(1, 1, 1.04)
        with config.local(compare=CompareConfig(precision=1)):
            assert a.is_equal(b)
        assert not a.is_equal(b)

    def test_local_restored_on_error(self):
        with pytest.raises(RuntimeError):
            with config.local(compare=CompareConfig(precision=1)):
                raise RuntimeError("boom")
        assert config.precision == 10

    def test_unknown_section(self):
        with pytest.raises(ValueError):
            config.local(parallel=None)

    def test_override_is_thread_local(self):
        seen = []

        def worker():
            seen.append(config.kernel)

        with config.local(compute=ComputeConfig(kernel=KernelBackend.NUMPY)):
            t = threading.Thread(target=worker)
            t.start()
            t.join()
        assert seen == [KernelBackend.BLAS]
