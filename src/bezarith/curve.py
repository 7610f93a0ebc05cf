"""Cubic Bezier curves"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from bezarith.basis import basis, bezier_coefficients, bounding_box4, de_casteljau3, derivative4, subdivide4
from bezarith.bounds import Bounds
from bezarith.consts import SMALL_DISTANCE
from bezarith.coordinate import Coord2, as_coord
from bezarith.errors import MalformedPathError

# Roots with a larger imaginary part are not considered real
_ROOT_IMAG_EPS: float = 1.0e-9
# Roots slightly outside [0, 1] are clamped back when looking for a point
_ROOT_T_EPS: float = 1.0e-6


@runtime_checkable
class BezierCurve(Protocol):
    """Anything that can describe a cubic Bezier curve."""

    def start_point(self) -> Coord2: ...

    def control_points(self) -> Tuple[Coord2, Coord2]: ...

    def end_point(self) -> Coord2: ...


###############################################################################
# Curve
###############################################################################
@dataclass(frozen=True)
class Curve:
    """
    Immutable cubic Bezier curve.

    Attributes:
        start (Coord2): Start point (t=0).
        cp1 (Coord2): First control point.
        cp2 (Coord2): Second control point.
        end (Coord2): End point (t=1).
    """

    start: Coord2
    cp1: Coord2
    cp2: Coord2
    end: Coord2

    @classmethod
    def from_points(cls, start, control_points, end) -> Curve:
        """
        Create a curve from point-like values.

        Args:
            start: Start point.
            control_points: Pair of control points (cp1, cp2).
            end: End point.

        Raises:
            MalformedPathError: If control_points is not a pair or a value is no point.
        """
        if len(control_points) != 2:
            raise MalformedPathError(f"A cubic curve needs two control points, got {len(control_points)}")
        cp1, cp2 = control_points
        return cls(as_coord(start), as_coord(cp1), as_coord(cp2), as_coord(end))

    @classmethod
    def from_curve(cls, curve: BezierCurve) -> Curve:
        """Copy any object exposing start_point(), control_points() and end_point()."""
        if isinstance(curve, Curve):
            return curve
        return cls.from_points(curve.start_point(), curve.control_points(), curve.end_point())

    @classmethod
    def from_array(cls, points: NDArray[np.float64]) -> Curve:
        """Create a curve from a (4, 2) array (extra columns are ignored)."""
        points_array = np.asarray(points, dtype=np.float64)
        if points_array.ndim != 2 or points_array.shape[0] != 4 or points_array.shape[1] < 2:
            raise MalformedPathError("A cubic curve needs a (4, 2) array of control points.")
        return cls(*(Coord2(float(row[0]), float(row[1])) for row in points_array))

    def start_point(self) -> Coord2:
        """The start point of the curve."""
        return self.start

    def control_points(self) -> Tuple[Coord2, Coord2]:
        """The two control points of the curve."""
        return (self.cp1, self.cp2)

    def end_point(self) -> Coord2:
        """The end point of the curve."""
        return self.end

    def all_points(self) -> Tuple[Coord2, Coord2, Coord2, Coord2]:
        """start, cp1, cp2, end."""
        return (self.start, self.cp1, self.cp2, self.end)

    def to_array(self) -> NDArray[np.float64]:
        """Control points as (4, 2) array."""
        return np.array([p.to_tuple() for p in self.all_points()], dtype=np.float64)

    ###########################################################################
    # Evaluation
    ###########################################################################

    def point_at_pos(self, t: float) -> Coord2:
        """The point on the curve at parameter t."""
        return basis(t, self.start, self.cp1, self.cp2, self.end)

    def tangent_at_pos(self, t: float) -> Coord2:
        """
        The (unnormalized) derivative of the curve at t.

        Evaluates the derivative weights with de Casteljau.
        """
        d1, d2, d3 = derivative4(self.start, self.cp1, self.cp2, self.end)
        return de_casteljau3(t, d1, d2, d3)

    def normal_at_pos(self, t: float) -> Coord2:
        """The tangent at t rotated anticlockwise by 90 degrees (points to the left)."""
        return self.tangent_at_pos(t).rotate_90()

    def unit_normal_at_pos(self, t: float) -> Coord2:
        """
        Normalized normal at t.

        Where the tangent vanishes (coincident control points) the chord
        towards the nearest distinct point is used instead.
        """
        normal = self.normal_at_pos(t)
        if normal.magnitude() > 1.0e-12:
            return normal.to_unit_vector()
        before = self.point_at_pos(max(t - 0.001, 0.0))
        after = self.point_at_pos(min(t + 0.001, 1.0))
        return (after - before).rotate_90().to_unit_vector()

    def subdivide(self, t: float) -> Tuple[Curve, Curve]:
        """Split the curve at t into two curves."""
        left, right = subdivide4(t, self.start, self.cp1, self.cp2, self.end)
        return (Curve(*left), Curve(*right))

    def section(self, t_min: float, t_max: float) -> Curve:
        """
        The part of the curve between t_min and t_max.

        If t_min > t_max the returned curve runs backwards.
        """
        if abs(t_max) > 1.0e-9:
            left, _ = self.subdivide(t_max)
            _, result = left.subdivide(t_min / t_max)
            return result
        if abs(1.0 - t_min) > 1.0e-9:
            _, right = self.subdivide(t_min)
            result, _ = right.subdivide((t_max - t_min) / (1.0 - t_min))
            return result
        # t_min is 1 and t_max is 0: the whole curve, reversed
        return self.reverse()

    def reverse(self) -> Curve:
        """The same curve, running from end to start."""
        return Curve(self.end, self.cp2, self.cp1, self.start)

    ###########################################################################
    # Bounds and length
    ###########################################################################

    def bounding_box(self) -> Bounds:
        """Exact bounding box of the curve (not of its control polygon)."""
        xmin, xmax = bounding_box4(self.start.x, self.cp1.x, self.cp2.x, self.end.x)
        ymin, ymax = bounding_box4(self.start.y, self.cp1.y, self.cp2.y, self.end.y)
        return Bounds(xmin, ymin, xmax, ymax)

    def fast_bounding_box(self) -> Bounds:
        """Bounding box of the control polygon, which always contains the curve."""
        return Bounds.from_points(self.all_points())

    def control_polygon_length(self) -> float:
        """Length of the control polygon (an upper bound of the curve length)."""
        return (
            self.start.distance_to(self.cp1) + self.cp1.distance_to(self.cp2) + self.cp2.distance_to(self.end)
        )

    def estimate_length(self) -> float:
        """
        Estimated length of the curve.

        Average of chord and control polygon length (Gravesen), which is
        exact for straight lines and close for smooth curves.
        """
        chord = self.start.distance_to(self.end)
        return (chord + self.control_polygon_length()) / 2.0

    def is_near_zero_length(self, distance: float = SMALL_DISTANCE) -> bool:
        """True if every control point is within distance of the start point."""
        return all(self.start.is_near_to(p, distance) for p in (self.cp1, self.cp2, self.end))

    ###########################################################################
    # Polygonization and point lookup
    ###########################################################################

    def polygonize(self, steps: int) -> NDArray[np.float64]:
        """
        Polygonize the curve into line segments.

        Args:
            steps: Number of segments to divide the curve into (>= 1)

        Returns:
            NDArray[np.float64] of shape (steps+1, 2) with the points on the curve
        """
        if steps < 1:
            raise MalformedPathError(f"steps must be at least 1, got {steps}")
        points_array = self.to_array()

        t = np.linspace(0, 1, steps + 1, dtype=np.float64)
        omt = 1 - t
        omt2 = omt**2
        omt3 = omt2 * omt
        t2 = t**2
        t3 = t2 * t

        result = np.empty((steps + 1, 2), dtype=np.float64)
        result[:, 0] = (
            omt3 * points_array[0, 0]
            + 3 * omt2 * t * points_array[1, 0]
            + 3 * omt * t2 * points_array[2, 0]
            + t3 * points_array[3, 0]
        )
        result[:, 1] = (
            omt3 * points_array[0, 1]
            + 3 * omt2 * t * points_array[1, 1]
            + 3 * omt * t2 * points_array[2, 1]
            + t3 * points_array[3, 1]
        )
        return result

    def t_for_point(self, point: Coord2, max_distance: float = SMALL_DISTANCE) -> Optional[float]:
        """
        The parameter of a point lying on the curve, or None if the point is not on it.

        Candidates are the real roots of the x and y polynomials; the one whose
        curve point is closest to the given point wins.
        """
        candidates = [0.0, 1.0]
        for axis in (0, 1):
            w1, w2, w3, w4 = (p.to_tuple()[axis] for p in self.all_points())
            d, c, b, a = bezier_coefficients(w1, w2, w3, w4)
            coefficients = _trim_leading_zeros([d, c, b, a - point.to_tuple()[axis]])
            if len(coefficients) < 2:
                continue
            for root in np.roots(coefficients):
                if abs(root.imag) > _ROOT_IMAG_EPS:
                    continue
                t = float(root.real)
                if -_ROOT_T_EPS <= t <= 1.0 + _ROOT_T_EPS:
                    candidates.append(min(max(t, 0.0), 1.0))

        best_t = min(candidates, key=lambda t: self.point_at_pos(t).distance_to(point))
        if self.point_at_pos(best_t).distance_to(point) <= max_distance:
            return best_t
        return None

    def nearest_t(self, point: Coord2, samples: int = 32) -> float:
        """Parameter of the sampled curve point closest to the given point, refined by bisection."""
        polygon = self.polygonize(samples)
        distances = np.hypot(polygon[:, 0] - point.x, polygon[:, 1] - point.y)
        index = int(np.argmin(distances))
        step = 1.0 / samples
        best_t = index * step
        for _ in range(20):
            step /= 2.0
            for candidate in (best_t - step, best_t + step):
                if 0.0 <= candidate <= 1.0 and self.point_at_pos(candidate).distance_to(
                    point
                ) < self.point_at_pos(best_t).distance_to(point):
                    best_t = candidate
        return best_t


def _trim_leading_zeros(coefficients: Sequence[float], eps: float = 1.0e-12) -> list:
    """Drop leading (near) zero coefficients so np.roots sees the real degree."""
    scale = max((abs(c) for c in coefficients), default=0.0)
    limit = eps * max(scale, 1.0)
    index = 0
    while index < len(coefficients) and abs(coefficients[index]) <= limit:
        index += 1
    return list(coefficients[index:])


def curve_length(curve: BezierCurve, accuracy: float = SMALL_DISTANCE, depth: int = 0) -> float:
    """Length of a curve to within roughly the given accuracy (recursive subdivision)."""
    curve = Curve.from_curve(curve)
    chord = curve.start.distance_to(curve.end)
    polygon = curve.control_polygon_length()
    if depth >= 16 or polygon - chord <= accuracy or math.isclose(polygon, chord):
        return (polygon + chord) / 2.0
    left, right = curve.subdivide(0.5)
    return curve_length(left, accuracy / 2.0, depth + 1) + curve_length(right, accuracy / 2.0, depth + 1)


def move_point(curve: BezierCurve, t: float, offset) -> Curve:
    """
    Deform a curve so that its point at t moves by offset.

    Both control points are moved by the same amount; the start and end
    points stay where they are. A control point shift d moves the point at
    t by 3*t*(1-t)*d.

    Args:
        curve: The curve to deform.
        t: Position of the point to move, strictly between 0 and 1.
        offset: Vector the point is moved by.

    Raises:
        MalformedPathError: If t is not inside (0, 1).
    """
    if not 0.0 < t < 1.0:
        raise MalformedPathError(f"Only points strictly inside the curve can be moved, got t={t}")
    curve = Curve.from_curve(curve)
    shift = as_coord(offset) * (1.0 / (3.0 * t * (1.0 - t)))
    return Curve(curve.start, curve.cp1 + shift, curve.cp2 + shift, curve.end)
