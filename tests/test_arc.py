"""Test module for bezarith.arc

The tests are run using pytest.
These tests ensure that circles and arcs are approximated closely by cubic
curves.
"""

import math

import numpy as np
import pytest

from bezarith.arc import Circle, CircularArc
from bezarith.coordinate import Coord2
from bezarith.path import is_clockwise, path_is_closed

###############################################################################
# CircularArc Tests
###############################################################################


class TestCircularArc:
    """Test class for single arcs."""

    @pytest.mark.parametrize("sweep", [math.pi / 6.0, math.pi / 4.0, math.pi / 2.0])
    def test_points_on_circle(self, sweep):
        """Test that the curve stays close to the circle."""
        center = Coord2(2.0, -1.0)
        curve = CircularArc(center, 5.0, 0.3, 0.3 + sweep).to_bezier_curve()
        for t in np.linspace(0.0, 1.0, 21):
            assert curve.point_at_pos(float(t)).distance_to(center) == pytest.approx(5.0, rel=3e-4)

    def test_end_points(self):
        """Test that the arc starts and ends at the given angles."""
        arc = CircularArc(Coord2(0.0, 0.0), 2.0, 0.0, math.pi / 2.0)
        curve = arc.to_bezier_curve()
        assert curve.start.is_near_to(Coord2(2.0, 0.0), 1e-12)
        assert curve.end.is_near_to(Coord2(0.0, 2.0), 1e-12)
        assert arc.point_at_angle(math.pi).is_near_to(Coord2(-2.0, 0.0), 1e-12)

    def test_long_arc_is_split(self):
        """Test that arcs longer than 90 degrees use several curves."""
        curves = CircularArc(Coord2(0.0, 0.0), 1.0, 0.0, math.pi).to_curves()
        assert len(curves) == 2
        assert curves[0].end.is_near_to(curves[1].start, 1e-12)
        assert curves[1].end.is_near_to(Coord2(-1.0, 0.0), 1e-12)

    def test_clockwise_arc(self):
        """Test an arc running clockwise."""
        curves = CircularArc(Coord2(0.0, 0.0), 1.0, math.pi / 2.0, 0.0).to_curves()
        assert len(curves) == 1
        middle = curves[0].point_at_pos(0.5)
        assert middle.is_near_to(Coord2(math.sqrt(0.5), math.sqrt(0.5)), 1e-3)


###############################################################################
# Circle Tests
###############################################################################


class TestCircle:
    """Test class for full circles."""

    def test_path(self):
        """Test that the circle path is closed and anticlockwise."""
        path = Circle((5.0, 5.0), 4.0).to_path()
        assert len(path) == 4
        assert path.end_point() == path.start
        assert path_is_closed(path)
        assert not is_clockwise(path)

    def test_starts_at_45_degrees(self):
        """Test the first point of the circle."""
        curves = Circle(Coord2(0.0, 0.0), 1.0).to_curves()
        assert curves[0].start.is_near_to(Coord2(math.sqrt(0.5), math.sqrt(0.5)), 1e-12)

    def test_center_conversion(self):
        """Test that tuples are accepted as center."""
        assert Circle((1, 2), 3.0).center == Coord2(1.0, 2.0)
