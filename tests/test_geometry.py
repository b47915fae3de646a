"""Tests for the sparseness measure."""

import numpy as np
import pytest

from codon_structure.analysis.geometry import sparseness
from codon_structure.exceptions import AnalysisError

SQUARE = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]])


class TestSparseness:
    def test_self_comparison_excludes_own_point(self):
        # every corner is 1.0 from its nearest other corner
        assert sparseness(SQUARE, SQUARE) == pytest.approx(1.0)

    def test_self_comparison_is_never_zero_for_distinct_points(self):
        points = np.random.default_rng(0).normal(size=(20, 3))
        assert sparseness(points, points) > 0

    def test_explicit_exclusion_on_copies(self):
        assert sparseness(SQUARE, SQUARE.copy(), exclude_self=True) == pytest.approx(1.0)
        assert sparseness(SQUARE, SQUARE.copy()) == pytest.approx(0.0)

    def test_coincident_points_still_match(self):
        points = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        # nearest distances 0, 0, 1 in both directions over 6 points
        assert sparseness(points, points) == pytest.approx(1.0 / 3.0)

    def test_two_sets(self):
        a = np.array([[0.0, 0.0, 0.0]])
        b = np.array([[3.0, 4.0, 0.0], [6.0, 8.0, 0.0]])
        # a->b: 5; b->a: 5 and 10
        assert sparseness(a, b) == pytest.approx(20.0 / 3.0)

    def test_symmetric(self):
        rng = np.random.default_rng(1)
        a, b = rng.normal(size=(5, 3)), rng.normal(size=(7, 3))
        assert sparseness(a, b) == pytest.approx(sparseness(b, a))

    def test_empty_set(self):
        with pytest.raises(AnalysisError):
            sparseness(np.empty((0, 3)), SQUARE)

    def test_single_point_self_comparison(self):
        point = np.array([[1.0, 2.0, 3.0]])
        with pytest.raises(AnalysisError):
            sparseness(point, point)

    def test_self_comparison_shape_mismatch(self):
        with pytest.raises(AnalysisError):
            sparseness(SQUARE, SQUARE[:3], exclude_self=True)
