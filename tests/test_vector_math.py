"""
Unit Tests for Vector Math

The similarity primitives every search path depends on.
"""

import math

import numpy as np
import pytest

from thesis_search.core.errors import DimensionMismatch
from thesis_search.retrieval.vector_math import (
    cosine_similarity,
    dot_product,
    dot_product_matrix,
    euclidean_distance,
    normalize,
    stack_vectors,
)


class TestDotProduct:
    def test_orthogonal_vectors(self):
        assert dot_product([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_accepts_lists_and_arrays(self):
        assert dot_product([1.0, 2.0, 3.0], np.array([4.0, 5.0, 6.0])) == 32.0

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatch) as exc:
            dot_product([1.0, 2.0], [1.0, 2.0, 3.0])

        assert exc.value.expected == 2
        assert exc.value.actual == 3

    def test_dimension_mismatch_is_value_error(self):
        """Callers catching ValueError still see it."""
        with pytest.raises(ValueError):
            dot_product([1.0], [1.0, 2.0])


class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([0.3, 0.4], [0.3, 0.4]) == pytest.approx(1.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_ignores_magnitude(self):
        assert cosine_similarity([1.0, 1.0], [10.0, 10.0]) == pytest.approx(1.0)

    def test_zero_vector_gives_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([1.0, 1.0], [0.0, 0.0]) == 0.0

    def test_result_stays_in_range(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            a = rng.standard_normal(16)
            b = rng.standard_normal(16)
            assert -1.0 <= cosine_similarity(a, b) <= 1.0

    def test_equals_dot_product_for_normalized_vectors(self):
        a = normalize([3.0, 4.0, 12.0])
        b = normalize([1.0, -2.0, 2.0])
        assert cosine_similarity(a, b) == pytest.approx(dot_product(a, b), abs=1e-6)

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatch):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


class TestEuclideanDistance:
    def test_distance(self):
        assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)

    def test_same_point(self):
        assert euclidean_distance([1.0, 2.0], [1.0, 2.0]) == 0.0

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatch):
            euclidean_distance([1.0], [1.0, 2.0])


class TestNormalize:
    def test_unit_length(self):
        v = normalize([3.0, 4.0])
        assert float(np.linalg.norm(v)) == pytest.approx(1.0)
        assert v.tolist() == pytest.approx([0.6, 0.8])

    def test_already_normalized_is_stable(self):
        v = normalize([0.6, 0.8])
        assert normalize(v).tolist() == pytest.approx(v.tolist())

    def test_zero_vector_unchanged(self):
        v = normalize([0.0, 0.0, 0.0])
        assert v.tolist() == [0.0, 0.0, 0.0]
        assert not any(math.isnan(x) for x in v)

    def test_returns_float32(self):
        assert normalize([1.0, 2.0]).dtype == np.float32


class TestDotProductMatrix:
    def test_scores_every_row_in_order(self):
        matrix = np.array([[1.0, 0.0], [0.0, 1.0], [0.6, 0.8]])
        scores = dot_product_matrix(matrix, [1.0, 0.0])
        assert scores.tolist() == pytest.approx([1.0, 0.0, 0.6])

    def test_empty_matrix(self):
        assert dot_product_matrix(np.zeros((0, 3)), [1.0, 0.0, 0.0]).size == 0

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatch):
            dot_product_matrix(np.ones((2, 3)), [1.0, 0.0])


class TestStackVectors:
    def test_stacks_rows_in_order(self):
        matrix = stack_vectors([[1.0, 0.0], np.array([0.6, 0.8])], dim=2)

        assert matrix.shape == (2, 2)
        assert matrix[1].tolist() == pytest.approx([0.6, 0.8])

    def test_empty_gives_zero_rows(self):
        assert stack_vectors([], dim=3).shape == (0, 3)

    def test_mixed_lengths_raise_dimension_mismatch(self):
        with pytest.raises(DimensionMismatch) as exc_info:
            stack_vectors([[1.0, 0.0, 0.0, 0.0], [1.0, 0.0, 0.0]], dim=4)

        assert exc_info.value.expected == 4
        assert exc_info.value.actual == 3
