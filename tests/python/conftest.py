"""
Pytest configuration and shared fixtures for dmat tests.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from dmat import Matrix, config, ComputeConfig, KernelBackend


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_config():
    """Restore default configuration after every test."""
    yield
    config.reset()


@pytest.fixture(params=[KernelBackend.BLAS, KernelBackend.NUMPY], ids=["blas", "numpy"])
def kernel_backend(request):
    """Run a test once per kernel backend."""
    with config.local(compute=ComputeConfig(kernel=request.param)):
        yield request.param


@pytest.fixture
def diag_2x2():
    """[[1, 0],
        [0, 4]]"""
    return Matrix.of_size(2, 2, 0.0, diagonal=[1.0, 4.0])


@pytest.fixture
def rect_2x3():
    """[[1, 2, 3],
        [4, 5, 6]]"""
    return Matrix.from_buffer([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], 2, 3)


@pytest.fixture
def rect_3x2():
    """[[7, 8],
        [9, 10],
        [11, 12]]"""
    return Matrix.from_buffer([7.0, 8.0, 9.0, 10.0, 11.0, 12.0], 3, 2)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


# =============================================================================
# Helper Functions
# =============================================================================

def random_matrix(rng, rows, columns):
    """Matrix of standard normal values."""
    return Matrix.from_buffer(rng.standard_normal(rows * columns), rows, columns)


def assert_matrix_allclose(mat, expected, rtol=1e-12, atol=1e-12):
    """Assert a Matrix matches a 2-D array-like."""
    expected = np.asarray(expected, dtype=np.float64)
    assert mat.shape == expected.shape
    np.testing.assert_allclose(mat.to_numpy(), expected, rtol=rtol, atol=atol)
