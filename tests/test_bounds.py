"""Test module for bezarith.bounds

The tests are run using pytest.
These tests ensure that bounding boxes are normalized and combine correctly.
"""

import pytest

from bezarith.bounds import Bounds
from bezarith.coordinate import Coord2

###############################################################################
# Bounds Tests
###############################################################################


class TestBounds:
    """Test class for Bounds functionality."""

    def test_normalization(self):
        """Test that swapped min and max values are normalized."""
        bounds = Bounds(10.0, 20.0, 0.0, 5.0)
        assert bounds.extent == (0.0, 5.0, 10.0, 20.0)

    def test_dimensions(self):
        """Test width, height, area and centroid."""
        bounds = Bounds(1.0, 2.0, 5.0, 8.0)
        assert bounds.width == 4.0
        assert bounds.height == 6.0
        assert bounds.area == 24.0
        assert bounds.centroid == Coord2(3.0, 5.0)

    def test_from_points(self):
        """Test the smallest box around a set of points."""
        bounds = Bounds.from_points([Coord2(1.0, 5.0), Coord2(-2.0, 3.0), Coord2(4.0, -1.0)])
        assert bounds.min_point == Coord2(-2.0, -1.0)
        assert bounds.max_point == Coord2(4.0, 5.0)

    def test_from_no_points(self):
        """Test that no points give the degenerate box at the origin."""
        assert Bounds.from_points([]) == Bounds(0.0, 0.0, 0.0, 0.0)

    def test_union(self):
        """Test the union of two boxes."""
        union = Bounds(0.0, 0.0, 1.0, 1.0).union(Bounds(2.0, -1.0, 3.0, 0.5))
        assert union.extent == (0.0, -1.0, 3.0, 1.0)

    @pytest.mark.parametrize(
        "other, tolerance, expected",
        [
            (Bounds(0.5, 0.5, 2.0, 2.0), 0.0, True),
            (Bounds(1.0, 0.0, 2.0, 1.0), 0.0, True),
            (Bounds(1.005, 0.0, 2.0, 1.0), 0.0, False),
            (Bounds(1.005, 0.0, 2.0, 1.0), 0.01, True),
            (Bounds(5.0, 5.0, 6.0, 6.0), 0.01, False),
        ],
    )
    def test_overlaps(self, other, tolerance, expected):
        """Test overlap detection with and without tolerance."""
        assert Bounds(0.0, 0.0, 1.0, 1.0).overlaps(other, tolerance) is expected

    def test_contains_point(self):
        """Test point containment including the border."""
        bounds = Bounds(0.0, 0.0, 1.0, 1.0)
        assert bounds.contains_point(Coord2(0.5, 0.5))
        assert bounds.contains_point(Coord2(1.0, 0.0))
        assert not bounds.contains_point(Coord2(1.1, 0.5))
        assert bounds.contains_point(Coord2(1.1, 0.5), tolerance=0.2)
