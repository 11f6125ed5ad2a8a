"""
Tests for the full-rescan helpers.
"""

import numpy as np
import pytest

from fnmaxima.ordering import ReversedOrdering
from fnmaxima.point import Point
from fnmaxima.scan import is_local_maximum, local_maxima_mask, scan_local_maxima


def points(values):
    return [Point.of(i, v) for i, v in enumerate(values)]


class TestScanLocalMaxima:
    def test_empty(self):
        assert scan_local_maxima([]) == []

    def test_single_point_is_a_maximum(self):
        assert scan_local_maxima(points([7])) == [(0, 7)]

    def test_plateau_is_all_maxima(self):
        assert scan_local_maxima(points([5, 5, 5])) == [(0, 5), (1, 5), (2, 5)]

    def test_bounded_plateau(self):
        result = scan_local_maxima(points([1, 4, 4, 2]))
        assert [p.argument for p in result] == [1, 2]

    def test_only_immediate_neighbours_count(self):
        """The first point of 3, 3, 5 is a maximum; the 5 is two steps away."""
        result = scan_local_maxima(points([3, 3, 5]))
        assert [p.argument for p in result] == [0, 2]

    def test_custom_value_order(self):
        result = scan_local_maxima(points([1, 4, 2]), ReversedOrdering())
        assert [p.argument for p in result] == [0, 2]

    def test_is_local_maximum_edges(self):
        values = [3, 1, 2]
        assert is_local_maximum(values, 0)
        assert not is_local_maximum(values, 1)
        assert is_local_maximum(values, 2)


class TestLocalMaximaMask:
    def test_matches_scan(self):
        rng = np.random.default_rng(7)
        values = rng.integers(0, 4, size=200)
        expected = [p.argument for p in scan_local_maxima(points(values.tolist()))]
        assert np.flatnonzero(local_maxima_mask(values)).tolist() == expected

    def test_docstring_example(self):
        np.testing.assert_array_equal(
            local_maxima_mask([1, 3, 3, 2, 5]),
            np.array([False, True, True, False, True]),
        )

    def test_empty_and_single(self):
        assert local_maxima_mask(np.array([])).shape == (0,)
        np.testing.assert_array_equal(local_maxima_mask([9.5]), [True])

    def test_rejects_2d(self):
        with pytest.raises(ValueError, match="1-D"):
            local_maxima_mask(np.zeros((2, 2)))
