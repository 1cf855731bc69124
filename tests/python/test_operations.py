"""
Tests for arithmetic operations.

Every test that reaches the kernel runs once per kernel backend.
"""

import pytest
import numpy as np

from dmat import Matrix, Ownership, DimensionError
from conftest import assert_matrix_allclose, random_matrix


class TestAdditive:
    """Test add/subtract pairs."""

    def test_by_adding(self, kernel_backend, rect_2x3):
        other = Matrix.of_size(2, 3, 10.0)
        result = rect_2x3.by_adding(other)
        assert_matrix_allclose(result, [[11, 12, 13], [14, 15, 16]])
        assert result.ownership is Ownership.COPIED
        assert rect_2x3.to_list() == [1, 2, 3, 4, 5, 6]
        assert other.to_list() == [10.0] * 6

    def test_add_in_place_matches_allocating(self, kernel_backend, rng):
        a = random_matrix(rng, 4, 5)
        b = random_matrix(rng, 4, 5)
        b_before = b.to_list()
        expected = a.by_adding(b)
        a.add(b)
        assert a.is_equal(expected, 15)
        assert b.to_list() == b_before

    def test_by_subtracting(self, kernel_backend, rect_2x3):
        result = rect_2x3.by_subtracting(Matrix.of_size(2, 3, 1.0))
        assert_matrix_allclose(result, [[0, 1, 2], [3, 4, 5]])

    def test_subtract_in_place_matches_allocating(self, kernel_backend, rng):
        a = random_matrix(rng, 3, 3)
        b = random_matrix(rng, 3, 3)
        expected = a.by_subtracting(b)
        a.subtract(b)
        assert a.is_equal(expected, 15)

    def test_add_then_subtract_roundtrip(self, kernel_backend, rng):
        a = random_matrix(rng, 6, 2)
        b = random_matrix(rng, 6, 2)
        assert a.by_adding(b).by_subtracting(b).is_equal(a, 10)

    def test_add_self(self, kernel_backend, rect_2x3):
        rect_2x3.add(rect_2x3)
        assert rect_2x3.to_list() == [2, 4, 6, 8, 10, 12]

    @pytest.mark.parametrize("method", ["by_adding", "add", "by_subtracting", "subtract"])
    def test_shape_mismatch_leaves_operands_unchanged(self, kernel_backend, rect_2x3, rect_3x2, method):
        before = rect_2x3.to_list()
        with pytest.raises(DimensionError):
            getattr(rect_2x3, method)(rect_3x2)
        assert rect_2x3.to_list() == before

    def test_operators(self, kernel_backend, rect_2x3):
        ones = Matrix.of_size(2, 3, 1.0)
        assert (rect_2x3 + ones).to_list() == [2, 3, 4, 5, 6, 7]
        assert (rect_2x3 - ones).to_list() == [0, 1, 2, 3, 4, 5]
        buffer = rect_2x3.array
        rect_2x3 += ones
        rect_2x3 -= ones
        rect_2x3 += ones
        assert rect_2x3.array is buffer
        assert rect_2x3.to_list() == [2, 3, 4, 5, 6, 7]


class TestScalar:
    """Test scalar multiply and negation."""

    def test_by_multiplying_scalar(self, kernel_backend, rect_2x3):
        result = rect_2x3.by_multiplying_scalar(2.0)
        assert result.to_list() == [2, 4, 6, 8, 10, 12]
        assert rect_2x3.to_list() == [1, 2, 3, 4, 5, 6]

    def test_by_multiplying_scalar_with_addend(self, kernel_backend, rect_2x3):
        addend = Matrix.of_size(2, 3, 0.5)
        result = rect_2x3.by_multiplying_scalar(-1.0, addend)
        assert result.to_list() == [-0.5, -1.5, -2.5, -3.5, -4.5, -5.5]
        assert addend.to_list() == [0.5] * 6

    def test_by_multiplying_scalar_addend_mismatch(self, kernel_backend, rect_2x3, rect_3x2):
        with pytest.raises(DimensionError):
            rect_2x3.by_multiplying_scalar(2.0, rect_3x2)

    def test_multiply_scalar_in_place(self, kernel_backend, rng):
        a = random_matrix(rng, 3, 4)
        expected = a.by_multiplying_scalar(0.25)
        a.multiply_scalar(0.25)
        assert a.is_equal(expected, 15)

    def test_negate(self, kernel_backend, rect_2x3):
        negated = rect_2x3.by_negating()
        assert negated.to_list() == [-1, -2, -3, -4, -5, -6]
        assert negated.is_equal(rect_2x3.by_multiplying_scalar(-1.0), 15)
        rect_2x3.negate()
        assert rect_2x3.is_equal(negated, 15)

    def test_operators(self, kernel_backend, rect_2x3):
        assert (rect_2x3 * 3).to_list() == [3, 6, 9, 12, 15, 18]
        assert (0.5 * rect_2x3).to_list() == [0.5, 1, 1.5, 2, 2.5, 3]
        assert (-rect_2x3).to_list() == [-1, -2, -3, -4, -5, -6]
        rect_2x3 *= 2
        assert rect_2x3.to_list() == [2, 4, 6, 8, 10, 12]

    def test_matrix_times_matrix_operator_unsupported(self, rect_2x3):
        with pytest.raises(TypeError):
            rect_2x3 * rect_2x3


class TestElementWise:
    """Test elementwise multiplication."""

    def test_by_element_wise_multiplying(self, rect_2x3):
        other = Matrix.from_sequence([2, 0, 1, -1, 0.5, 3], 2, 3)
        result = rect_2x3.by_element_wise_multiplying(other)
        assert result.to_list() == [2, 0, 3, -4, 2.5, 18]
        assert rect_2x3.to_list() == [1, 2, 3, 4, 5, 6]

    def test_element_wise_multiply_in_place(self, rng):
        a = random_matrix(rng, 5, 5)
        b = random_matrix(rng, 5, 5)
        expected = a.by_element_wise_multiplying(b)
        a.element_wise_multiply(b)
        assert a.is_equal(expected, 15)

    def test_shape_mismatch(self, rect_2x3, rect_3x2):
        before = rect_2x3.to_list()
        with pytest.raises(DimensionError):
            rect_2x3.by_element_wise_multiplying(rect_3x2)
        with pytest.raises(DimensionError):
            rect_2x3.element_wise_multiply(rect_3x2)
        assert rect_2x3.to_list() == before


class TestTranspose:
    """Test by_transposing()."""

    def test_row_major_transpose(self):
        m = Matrix.from_buffer([1, 2, 3, 4, 5, 6], 2, 3, Ownership.COPIED)
        t = m.by_transposing()
        assert_matrix_allclose(t, [[1, 4], [2, 5], [3, 6]])
        assert t.ownership is Ownership.COPIED

    @pytest.mark.parametrize("shape", [(1, 1), (1, 6), (6, 1), (3, 5), (4, 4)])
    def test_double_transpose(self, rng, shape):
        a = random_matrix(rng, *shape)
        for precision in (0, 5, 15):
            assert a.by_transposing().by_transposing().is_equal(a, precision)

    def test_vector_transpose_does_not_alias(self):
        v = Matrix.from_sequence([1, 2, 3], 1, 3)
        t = v.T
        t.set_value(0, 0, 100.0)
        assert v.value_at(0, 0) == 1.0
        assert not np.shares_memory(t.array, v.array)


class TestMultiply:
    """Test matrix products."""

    def test_by_multiplying_right(self, kernel_backend, rect_2x3, rect_3x2):
        result = rect_2x3.by_multiplying_right(rect_3x2)
        assert_matrix_allclose(result, [[58, 64], [139, 154]])
        assert result.ownership is Ownership.COPIED
        assert rect_2x3.to_list() == [1, 2, 3, 4, 5, 6]
        assert rect_3x2.to_list() == [7, 8, 9, 10, 11, 12]

    def test_matmul_operator(self, kernel_backend, rect_2x3, rect_3x2):
        assert_matrix_allclose(rect_2x3 @ rect_3x2, [[58, 64], [139, 154]])

    def test_transpose_result(self, kernel_backend, rect_2x3, rect_3x2):
        result = rect_2x3.by_multiplying_right(rect_3x2, transpose=True)
        assert_matrix_allclose(result, [[58, 139], [64, 154]])

    def test_factor(self, kernel_backend, rect_2x3, rect_3x2):
        result = rect_2x3.by_multiplying_right(rect_3x2, factor=2.0)
        assert_matrix_allclose(result, [[116, 128], [278, 308]])

    def test_addend(self, kernel_backend, rect_2x3, rect_3x2):
        addend = Matrix.from_sequence([1, 2, 3, 4], 2, 2)
        result = rect_2x3.by_multiplying_right(rect_3x2, addend=addend)
        assert_matrix_allclose(result, [[59, 66], [142, 158]])
        assert addend.to_list() == [1, 2, 3, 4]

    def test_all_options(self, kernel_backend, rng):
        a = random_matrix(rng, 4, 3)
        b = random_matrix(rng, 3, 5)
        c = random_matrix(rng, 5, 4)
        result = a.by_multiplying_right(b, transpose=True, addend=c, factor=-0.5)
        expected = -0.5 * (a.to_numpy() @ b.to_numpy()).T + c.to_numpy()
        assert_matrix_allclose(result, expected)

    def test_matches_numpy(self, kernel_backend, rng):
        a = random_matrix(rng, 7, 4)
        b = random_matrix(rng, 4, 9)
        assert_matrix_allclose(a @ b, a.to_numpy() @ b.to_numpy())

    def test_vector_products(self, kernel_backend):
        row = Matrix.from_sequence([1, 2, 3], 1, 3)
        col = Matrix.from_sequence([4, 5, 6], 3, 1)
        assert_matrix_allclose(row @ col, [[32]])
        assert_matrix_allclose(col @ row, np.outer([4, 5, 6], [1, 2, 3]))

    def test_identity(self, kernel_backend, rng):
        eye = Matrix.identity(4, 4)
        assert (eye @ eye).is_equal(eye, 15)
        a = random_matrix(rng, 4, 4)
        assert (a @ eye).is_equal(a, 12)
        assert (eye @ a).is_equal(a, 12)

    def test_dimension_mismatch(self, kernel_backend, rect_2x3):
        other = Matrix.of_size(2, 2, 1.0)
        before = (rect_2x3.to_list(), other.to_list())
        with pytest.raises(DimensionError):
            rect_2x3.by_multiplying_right(other)
        assert (rect_2x3.to_list(), other.to_list()) == before

    def test_addend_dimension_mismatch(self, kernel_backend, rect_2x3, rect_3x2):
        with pytest.raises(DimensionError):
            rect_2x3.by_multiplying_right(rect_3x2, addend=Matrix.of_size(3, 3))
        # 2x2 result either way; a 2x3 addend fits neither
        with pytest.raises(DimensionError):
            rect_2x3.by_multiplying_right(rect_3x2, transpose=True, addend=rect_2x3)

    def test_transposed_addend_shape(self, kernel_backend, rng):
        a = random_matrix(rng, 2, 3)
        b = random_matrix(rng, 3, 4)
        with pytest.raises(DimensionError):
            a.by_multiplying_right(b, transpose=True, addend=Matrix.of_size(2, 4))
        result = a.by_multiplying_right(b, transpose=True, addend=Matrix.of_size(4, 2))
        assert result.shape == (4, 2)


class TestTransposedMultiply:
    """Test by_transposing_and_multiplying_right/left."""

    def test_right(self, kernel_backend, rect_2x3):
        other = Matrix.from_sequence([1, 2, 3, 4], 2, 2)
        result = rect_2x3.by_transposing_and_multiplying_right(other)
        assert_matrix_allclose(result, [[13, 18], [17, 24], [21, 30]])

    def test_left(self, kernel_backend, rect_2x3):
        other = Matrix.from_sequence([1, 0, 1], 1, 3)
        result = rect_2x3.by_transposing_and_multiplying_left(other)
        assert_matrix_allclose(result, [[4, 10]])

    def test_match_explicit_transpose(self, kernel_backend, rng):
        a = random_matrix(rng, 5, 3)
        b = random_matrix(rng, 5, 4)
        c = random_matrix(rng, 6, 3)
        right = a.by_transposing_and_multiplying_right(b)
        left = a.by_transposing_and_multiplying_left(c)
        assert right.is_equal(a.by_transposing() @ b, 12)
        assert left.is_equal(c @ a.by_transposing(), 12)

    def test_dimension_mismatch(self, kernel_backend, rect_2x3, rect_3x2):
        with pytest.raises(DimensionError):
            rect_2x3.by_transposing_and_multiplying_right(rect_3x2)
        with pytest.raises(DimensionError):
            rect_2x3.by_transposing_and_multiplying_left(rect_3x2)


class TestScalarResults:
    """Test trace and dot product."""

    def test_trace(self, diag_2x2):
        assert diag_2x2.trace() == 5.0

    @pytest.mark.parametrize("n", [1, 2, 5, 10])
    def test_identity_trace(self, n):
        assert Matrix.identity(n, n).trace() == float(n)

    def test_dot_with(self):
        a = Matrix.from_sequence([1, 2, 3, 4], 2, 2)
        b = Matrix.from_sequence([5, 6, 7, 8], 2, 2)
        assert a.dot_with(b) == 70.0

    def test_dot_with_shape_mismatch(self, rect_2x3, rect_3x2):
        with pytest.raises(DimensionError):
            rect_2x3.dot_with(rect_3x2)


class TestUnitize:
    """Test by_unitizing()."""

    def test_row_vector(self):
        v = Matrix.from_sequence([2, 4, 6], 1, 3)
        assert v.by_unitizing().to_list() == [0.0, 0.5, 1.0]
        assert v.to_list() == [2, 4, 6]

    def test_column_vector(self):
        v = Matrix.from_sequence([-1, 3, 1], 3, 1)
        u = v.by_unitizing()
        assert u.shape == (3, 1)
        assert u.to_list() == [0.0, 1.0, 0.5]

    def test_constant_vector_maps_to_zero(self):
        v = Matrix.of_size(1, 4, 3.0)
        assert v.by_unitizing().to_list() == [0.0] * 4

    def test_single_cell(self):
        assert Matrix.of_size(1, 1, 7.0).by_unitizing().to_list() == [0.0]

    def test_non_vector(self, diag_2x2):
        with pytest.raises(DimensionError):
            diag_2x2.by_unitizing()


class TestEquality:
    """Test is_equal()."""

    def test_precision(self):
        a = Matrix.of_size(1, 2, 1.0)
        b = Matrix.of_size(1, 2, 1.001)
        assert a.is_equal(b, 2)
        assert not a.is_equal(b, 3)

    def test_default_precision(self):
        a = Matrix.from_sequence([0.1 + 0.2], 1, 1)
        b = Matrix.from_sequence([0.3], 1, 1)
        assert a.is_equal(b)

    def test_shape_mismatch_is_false(self, rect_2x3, rect_3x2):
        assert rect_2x3.is_equal(rect_3x2, 5) is False
        assert Matrix.of_size(1, 4).is_equal(Matrix.of_size(2, 2), 5) is False

    def test_non_matrix_is_false(self, rect_2x3):
        assert rect_2x3.is_equal([1, 2, 3, 4, 5, 6], 5) is False

    def test_eq_operator_is_identity(self, rect_2x3):
        assert rect_2x3 != rect_2x3.copy()
        assert rect_2x3 == rect_2x3
