"""Test module for bezarith.intersection

The tests are run using pytest.
These tests ensure that the curve/line, curve/ray and curve/curve searches
find the expected intersections, and that Bezier clipping agrees with the
bounding box subdivision search.
"""

import math

import pytest

from bezarith.arc import Circle
from bezarith.coordinate import Coord2
from bezarith.curve import Curve
from bezarith.errors import MalformedPathError
from bezarith.intersection import (
    curve_intersects_curve,
    curve_intersects_curve_bbox,
    curve_intersects_line,
    curve_intersects_ray,
    overlapping_region,
)
from bezarith.line import line_to_bezier


@pytest.fixture
def arch():
    """A symmetric arch over [0, 10] with its apex at (5, 6)."""
    return Curve(Coord2(0.0, 0.0), Coord2(0.0, 8.0), Coord2(10.0, 8.0), Coord2(10.0, 0.0))


class PointCurve:
    """A curve type of its own: accessors only, points as plain tuples."""

    def __init__(self, start, cp1, cp2, end):
        self._points = (start, cp1, cp2, end)

    @classmethod
    def of(cls, curve):
        return cls(*(point.to_tuple() for point in curve.all_points()))

    def start_point(self):
        return self._points[0]

    def control_points(self):
        return self._points[1], self._points[2]

    def end_point(self):
        return self._points[3]


###############################################################################
# Curve / Line Tests
###############################################################################


class TestCurveIntersectsLine:
    """Test class for the bisection search."""

    def test_two_crossings(self, arch):
        """Test a horizontal line crossing the arch twice."""
        hits = curve_intersects_line(arch, (Coord2(-1.0, 3.0), Coord2(11.0, 3.0)))
        assert len(hits) == 2
        for curve_t, line_t, pos in hits:
            assert pos.y == pytest.approx(3.0, abs=0.01)
            assert arch.point_at_pos(curve_t).is_near_to(pos, 1e-9)
            assert 0.0 <= line_t <= 1.0
        assert hits[0][0] < hits[1][0]
        assert hits[0][2].x + hits[1][2].x == pytest.approx(10.0, abs=0.02)

    def test_segment_too_short(self, arch):
        """Test that a segment ending before the curve finds nothing."""
        assert curve_intersects_line(arch, (Coord2(4.0, 3.0), Coord2(6.0, 3.0))) == []

    def test_line_above(self, arch):
        """Test a line passing above the apex."""
        assert curve_intersects_line(arch, (Coord2(-1.0, 7.0), Coord2(11.0, 7.0))) == []

    def test_crossing_lines(self):
        """Test two straight curves crossing at (5, 5)."""
        curve = line_to_bezier((Coord2(0.0, 0.0), Coord2(10.0, 10.0)))
        hits = curve_intersects_line(curve, (Coord2(10.0, 0.0), Coord2(0.0, 10.0)))
        assert len(hits) == 1
        curve_t, line_t, pos = hits[0]
        assert pos.is_near_to(Coord2(5.0, 5.0), 0.01)
        assert curve_t == pytest.approx(0.5, abs=0.01)
        assert line_t == pytest.approx(0.5, abs=0.01)

    def test_degenerate_inputs(self, arch):
        """Test that lines and curves without length give no intersections."""
        point = Coord2(5.0, 3.0)
        assert curve_intersects_line(arch, (point, point)) == []
        dot = Curve(point, point, point, point)
        assert curve_intersects_line(dot, (Coord2(0.0, 3.0), Coord2(10.0, 3.0))) == []

    def test_collinear(self):
        """Test that a curve lying on the line gives no intersections."""
        curve = line_to_bezier((Coord2(0.0, 0.0), Coord2(10.0, 0.0)))
        assert curve_intersects_line(curve, (Coord2(-5.0, 0.0), Coord2(5.0, 0.0))) == []

    def test_other_curve_types_and_tuple_lines(self, arch):
        """Test a curve of another type against a line of plain tuples."""
        hits = curve_intersects_line(PointCurve.of(arch), ((-1, 3), (11, 3)))
        expected = curve_intersects_line(arch, (Coord2(-1.0, 3.0), Coord2(11.0, 3.0)))
        assert len(hits) == len(expected) == 2
        for (curve_t, line_t, pos), (other_t, other_line_t, _) in zip(hits, expected):
            assert curve_t == pytest.approx(other_t)
            assert line_t == pytest.approx(other_line_t)
            assert isinstance(pos, Coord2)

    def test_accuracy_must_be_positive(self, arch):
        """Test that a non positive accuracy is rejected."""
        with pytest.raises(MalformedPathError):
            curve_intersects_line(arch, (Coord2(0.0, 3.0), Coord2(10.0, 3.0)), accuracy=0.0)


###############################################################################
# Curve / Ray Tests
###############################################################################


class TestCurveIntersectsRay:
    """Test class for the root solving ray search."""

    def test_ray_extends_beyond_points(self, arch):
        """Test that the ray is not limited to its two points."""
        hits = curve_intersects_ray(arch, (Coord2(4.0, 3.0), Coord2(6.0, 3.0)))
        assert len(hits) == 2
        for curve_t, ray_t, pos in hits:
            assert pos.y == pytest.approx(3.0, abs=1e-9)
            assert pos.is_near_to(arch.point_at_pos(curve_t), 1e-12)
        assert hits[0][1] < 0.0
        assert hits[1][1] > 1.0

    def test_vertical_ray(self, arch):
        """Test a vertical ray through the apex."""
        hits = curve_intersects_ray(arch, (Coord2(5.0, 0.0), Coord2(5.0, 1.0)))
        assert len(hits) == 1
        assert hits[0][0] == pytest.approx(0.5)
        assert hits[0][2].y == pytest.approx(6.0)
        assert hits[0][1] == pytest.approx(6.0)

    def test_ray_on_curve(self):
        """Test that a straight curve on the ray has no single crossing."""
        curve = line_to_bezier((Coord2(0.0, 0.0), Coord2(10.0, 0.0)))
        assert curve_intersects_ray(curve, (Coord2(0.0, 0.0), Coord2(1.0, 0.0))) == []

    def test_other_curve_types_and_tuple_rays(self, arch):
        """Test a curve of another type against a ray of plain tuples."""
        hits = curve_intersects_ray(PointCurve.of(arch), ((5, 0), (5, 1)))
        assert len(hits) == 1
        assert hits[0][2].y == pytest.approx(6.0)


###############################################################################
# Curve / Curve Tests
###############################################################################


class TestCurveIntersectsCurve:
    """Test class for Bezier clipping."""

    def test_crossing_lines(self):
        """Test that two crossing straight curves meet exactly once near (5, 5)."""
        curve1 = line_to_bezier((Coord2(0.0, 0.0), Coord2(10.0, 10.0)))
        curve2 = line_to_bezier((Coord2(10.0, 0.0), Coord2(0.0, 10.0)))
        hits = curve_intersects_curve(curve1, curve2)
        assert len(hits) == 1
        t1, t2 = hits[0]
        assert curve1.point_at_pos(t1).is_near_to(Coord2(5.0, 5.0), 0.01)
        assert curve2.point_at_pos(t2).is_near_to(Coord2(5.0, 5.0), 0.01)

    def test_arch_and_line(self, arch):
        """Test a curve crossing a straight curve twice."""
        line = line_to_bezier((Coord2(-1.0, 3.0), Coord2(11.0, 3.0)))
        hits = curve_intersects_curve(arch, line)
        assert len(hits) == 2
        for t1, t2 in hits:
            assert arch.point_at_pos(t1).is_near_to(line.point_at_pos(t2), 0.02)
            assert arch.point_at_pos(t1).y == pytest.approx(3.0, abs=0.02)

    def test_circles(self):
        """Test the two crossing points of overlapping circles."""
        hits = []
        for curve1 in Circle(Coord2(5.0, 5.0), 4.0).to_curves():
            for curve2 in Circle(Coord2(9.0, 5.0), 4.0).to_curves():
                hits.extend(curve1.point_at_pos(t1) for t1, _ in curve_intersects_curve(curve1, curve2))
        expected = [Coord2(7.0, 5.0 + math.sqrt(12.0)), Coord2(7.0, 5.0 - math.sqrt(12.0))]
        assert len(hits) == 2
        for point in expected:
            assert any(hit.is_near_to(point, 0.02) for hit in hits)

    def test_far_apart(self, arch):
        """Test curves whose bounding boxes do not meet."""
        other = line_to_bezier((Coord2(20.0, 0.0), Coord2(30.0, 10.0)))
        assert curve_intersects_curve(arch, other) == []

    def test_zero_length(self, arch):
        """Test that a curve without length meets nothing."""
        point = arch.point_at_pos(0.5)
        assert curve_intersects_curve(arch, Curve(point, point, point, point)) == []

    def test_touching_end_points(self):
        """Test curves meeting only at a shared end point."""
        curve1 = line_to_bezier((Coord2(0.0, 0.0), Coord2(2.0, 0.0)))
        curve2 = line_to_bezier((Coord2(2.0, 0.0), Coord2(2.0, 2.0)))
        hits = curve_intersects_curve(curve1, curve2)
        assert len(hits) == 1
        assert curve1.point_at_pos(hits[0][0]).is_near_to(Coord2(2.0, 0.0), 0.01)
        assert curve2.point_at_pos(hits[0][1]).is_near_to(Coord2(2.0, 0.0), 0.01)

    def test_agrees_with_bbox_search(self):
        """Test Bezier clipping against the subdivision search."""
        curve1 = Curve(Coord2(0.0, 0.0), Coord2(3.0, 10.0), Coord2(7.0, -10.0), Coord2(10.0, 0.0))
        curve2 = Curve(Coord2(0.0, 2.3), Coord2(4.0, -6.0), Coord2(6.5, 6.0), Coord2(10.0, -1.7))
        clipped = [curve1.point_at_pos(t1) for t1, _ in curve_intersects_curve(curve1, curve2)]
        subdivided = [curve1.point_at_pos(t1) for t1, _ in curve_intersects_curve_bbox(curve1, curve2)]
        assert clipped
        assert subdivided
        for point in clipped:
            assert any(point.is_near_to(other, 0.05) for other in subdivided)
        for point in subdivided:
            assert any(point.is_near_to(other, 0.05) for other in clipped)

    def test_other_curve_types(self):
        """Test curves of another type with only the curve accessors."""
        curve1 = line_to_bezier((Coord2(0.0, 0.0), Coord2(10.0, 10.0)))
        curve2 = line_to_bezier((Coord2(10.0, 0.0), Coord2(0.0, 10.0)))
        hits = curve_intersects_curve(PointCurve.of(curve1), PointCurve.of(curve2))
        assert len(hits) == 1
        assert curve1.point_at_pos(hits[0][0]).is_near_to(Coord2(5.0, 5.0), 0.01)

        subdivided = curve_intersects_curve_bbox(PointCurve.of(curve1), curve2)
        assert subdivided
        for t1, _ in subdivided:
            assert curve1.point_at_pos(t1).is_near_to(Coord2(5.0, 5.0), 0.05)


###############################################################################
# Overlap Tests
###############################################################################


class TestOverlappingRegion:
    """Test class for curves running along each other."""

    def test_identical_curves(self, arch):
        """Test that a curve overlaps itself completely."""
        assert overlapping_region(arch, arch) == ((0.0, 1.0), (0.0, 1.0))
        assert curve_intersects_curve(arch, arch) == [(0.0, 0.0), (1.0, 1.0)]

    def test_partial_overlap_of_lines(self):
        """Test two collinear straight curves sharing a part."""
        curve1 = line_to_bezier((Coord2(0.0, 0.0), Coord2(10.0, 0.0)))
        curve2 = line_to_bezier((Coord2(5.0, 0.0), Coord2(15.0, 0.0)))
        (c1_t1, c1_t2), (c2_t1, c2_t2) = overlapping_region(curve1, curve2)
        assert (c1_t1, c1_t2) == pytest.approx((0.5, 1.0))
        assert (c2_t1, c2_t2) == pytest.approx((0.0, 0.5))

    def test_section_of_curve(self, arch):
        """Test a curve overlapping a section of itself."""
        section = arch.section(0.25, 0.75)
        (c1_t1, c1_t2), (c2_t1, c2_t2) = overlapping_region(arch, section)
        assert (c1_t1, c1_t2) == pytest.approx((0.25, 0.75), abs=1e-6)
        assert (c2_t1, c2_t2) == pytest.approx((0.0, 1.0))

    def test_crossing_curves_do_not_overlap(self):
        """Test that crossing curves give None."""
        curve1 = line_to_bezier((Coord2(0.0, 0.0), Coord2(10.0, 10.0)))
        curve2 = line_to_bezier((Coord2(10.0, 0.0), Coord2(0.0, 10.0)))
        assert overlapping_region(curve1, curve2) is None

    def test_other_curve_types(self, arch):
        """Test overlap detection on a curve of another type."""
        assert overlapping_region(PointCurve.of(arch), arch) == ((0.0, 1.0), (0.0, 1.0))
