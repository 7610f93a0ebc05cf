"""Test module for bezarith.fit

The tests are run using pytest.
These tests ensure that cubic curves are recovered from sampled points and
that longer point sequences are split into several curves.
"""

import math

import numpy as np
import pytest

from bezarith.coordinate import Coord2
from bezarith.curve import Curve
from bezarith.errors import MalformedPathError
from bezarith.fit import chord_length_parameters, fit_curve, fit_curve_cubic


@pytest.fixture
def known_curve():
    return Curve(Coord2(0.0, 0.0), Coord2(2.0, 5.0), Coord2(8.0, 5.0), Coord2(10.0, -1.0))


###############################################################################
# fit_curve_cubic Tests
###############################################################################


class TestFitCurveCubic:
    """Test class for fitting a single cubic curve."""

    def test_reproduces_known_curve(self, known_curve):
        """Test that uniformly sampled points give back their curve."""
        points = known_curve.polygonize(49)
        fitted = fit_curve_cubic(points)
        for expected, actual in zip(known_curve.all_points(), fitted.all_points()):
            assert actual.is_near_to(expected, 1e-6)

    def test_accepts_coordinates(self, known_curve):
        """Test that sequences of Coord2 are accepted."""
        points = [known_curve.point_at_pos(t) for t in np.linspace(0.0, 1.0, 8)]
        fitted = fit_curve_cubic(points)
        assert fitted.cp1.is_near_to(known_curve.cp1, 1e-6)

    def test_few_points_give_a_line(self):
        """Test that two or three points give a straight curve."""
        fitted = fit_curve_cubic([(0.0, 0.0), (1.0, 3.0), (3.0, 0.0)])
        assert fitted.start == Coord2(0.0, 0.0)
        assert fitted.end == Coord2(3.0, 0.0)
        assert fitted.cp1.is_near_to(Coord2(1.0, 0.0), 1e-12)

    def test_too_few_points(self):
        """Test that a single point cannot be fitted."""
        with pytest.raises(MalformedPathError):
            fit_curve_cubic([(1.0, 1.0)])

    def test_wrong_shape(self):
        """Test that points need two components."""
        with pytest.raises(MalformedPathError):
            fit_curve_cubic(np.zeros((5,)))


###############################################################################
# fit_curve Tests
###############################################################################


class TestFitCurve:
    """Test class for fitting sequences of curves."""

    def test_chord_length_parameters(self):
        """Test parameters proportional to the travelled distance."""
        params = chord_length_parameters(np.array([[0.0, 0.0], [1.0, 0.0], [3.0, 0.0], [4.0, 0.0]]))
        assert np.allclose(params, [0.0, 0.25, 0.75, 1.0])
        assert chord_length_parameters(np.zeros((3, 2))) is None

    def test_single_curve_is_enough(self, known_curve):
        """Test that points of one cubic need only one curve."""
        curves = fit_curve(known_curve.polygonize(30), max_error=0.05)
        assert len(curves) == 1

    def test_semicircle_is_split(self):
        """Test that a semicircle needs several curves for a tight error."""
        angles = np.linspace(0.0, math.pi, 200)
        points = np.column_stack((10.0 * np.cos(angles), 10.0 * np.sin(angles)))
        curves = fit_curve(points, max_error=0.01)
        assert len(curves) >= 2
        assert curves[0].start.is_near_to(Coord2(10.0, 0.0), 1e-9)
        assert curves[-1].end.is_near_to(Coord2(-10.0, 0.0), 1e-9)
        for first, second in zip(curves, curves[1:]):
            assert first.end == second.start
        for curve in curves:
            assert curve.point_at_pos(0.5).distance_to(Coord2(0.0, 0.0)) == pytest.approx(10.0, abs=0.1)
