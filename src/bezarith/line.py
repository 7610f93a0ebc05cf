"""Straight lines: conversion to curves and implicit line equations."""

from __future__ import annotations

import math
from typing import Optional, Tuple

from bezarith.bounds import Bounds
from bezarith.coordinate import Coord2, as_coord
from bezarith.curve import Curve
from bezarith.errors import MalformedPathError

# A line is given by its two end points
Line = Tuple[Coord2, Coord2]


def as_line(line) -> Line:
    """
    Convert a pair of point-like values to a Line.

    Raises:
        MalformedPathError: If the value is not a pair of points.
    """
    try:
        start, end = line
    except (TypeError, ValueError) as err:
        raise MalformedPathError(f"A line needs (start, end), got {line!r}") from err
    if isinstance(start, Coord2) and isinstance(end, Coord2):
        return (start, end)
    return (as_coord(start), as_coord(end))


def line_to_bezier(line: Line) -> Curve:
    """A cubic curve tracing the line, control points at 1/3 and 2/3."""
    start, end = as_line(line)
    delta = end - start
    return Curve(start, start + delta * (1.0 / 3.0), start + delta * (2.0 / 3.0), end)


def line_coefficients_2d(line: Line) -> Tuple[float, float, float]:
    """
    Coefficients (a, b, c) of the implicit equation a*x + b*y + c = 0.

    The coefficients are normalized (a^2 + b^2 = 1), so evaluating the
    equation for a point gives its signed distance from the line. Points to
    the left of the direction start->end are positive. A line with no length
    gives (0, 0, 0).
    """
    start, end = as_line(line)
    length = start.distance_to(end)
    if length == 0.0:
        return (0.0, 0.0, 0.0)

    a = (start.y - end.y) / length
    b = (end.x - start.x) / length
    c = -(a * start.x + b * start.y)
    return (a, b, c)


def distance_to_line(coefficients: Tuple[float, float, float], point: Coord2) -> float:
    """Signed distance of a point from a line given by normalized coefficients."""
    a, b, c = coefficients
    return a * point.x + b * point.y + c


def which_side(line: Line, point: Coord2) -> int:
    """1 if the point is left of the line, -1 if right, 0 if it is on it."""
    distance = distance_to_line(line_coefficients_2d(line), as_coord(point))
    if distance > 0.0:
        return 1
    if distance < 0.0:
        return -1
    return 0


def line_point_at_pos(line: Line, t: float) -> Coord2:
    """Point at parameter t (0 = start, 1 = end)."""
    start, end = as_line(line)
    return start + (end - start) * t


def line_pos_for_point(line: Line, point: Coord2) -> float:
    """Parameter of the projection of a point onto the line."""
    start, end = as_line(line)
    delta = end - start
    length_sq = delta.dot(delta)
    if length_sq == 0.0:
        return 0.0
    return (as_coord(point) - start).dot(delta) / length_sq


def line_bounding_box(line: Line) -> Bounds:
    return Bounds.from_points(as_line(line))


def line_length(line: Line) -> float:
    start, end = as_line(line)
    return start.distance_to(end)


def ray_intersects_ray(line1: Line, line2: Line) -> Optional[Tuple[float, float]]:
    """
    Parameters (t1, t2) where the infinite lines through line1 and line2 meet.

    Parallel (and coincident) lines give None.
    """
    p, p_end = as_line(line1)
    q, q_end = as_line(line2)
    r, s = p_end - p, q_end - q
    denominator = r.cross(s)
    if math.isclose(denominator, 0.0, abs_tol=1.0e-12 * max(r.dot(r) * s.dot(s), 1.0)):
        return None
    qp = q - p
    return (qp.cross(s) / denominator, qp.cross(r) / denominator)


def line_intersects_line(line1: Line, line2: Line) -> Optional[Coord2]:
    """
    The point where two line segments cross, or None.

    Parallel and coincident segments give None.
    """
    params = ray_intersects_ray(line1, line2)
    if params is None:
        return None
    t1, t2 = params
    if 0.0 <= t1 <= 1.0 and 0.0 <= t2 <= 1.0:
        return line_point_at_pos(line1, t1)
    return None


def clip_line_to_bounds(line: Line, bounds: Bounds) -> Optional[Line]:
    """
    The part of the line segment inside the bounds (Liang-Barsky), or None.
    """
    start, end = as_line(line)
    delta = end - start
    t0, t1 = 0.0, 1.0

    for p, q in (
        (-delta.x, start.x - bounds.xmin),
        (delta.x, bounds.xmax - start.x),
        (-delta.y, start.y - bounds.ymin),
        (delta.y, bounds.ymax - start.y),
    ):
        if p == 0.0:
            if q < 0.0:
                return None
            continue
        ratio = q / p
        if p < 0.0:
            if ratio > t1:
                return None
            t0 = max(t0, ratio)
        else:
            if ratio < t0:
                return None
            t1 = min(t1, ratio)

    return (line_point_at_pos(line, t0), line_point_at_pos(line, t1))
