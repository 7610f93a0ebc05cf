"""
Intersections between cubic Bezier curves and lines, rays or other curves.

Three strategies are provided:
    - bisection search for curve/line intersections (curve_intersects_line)
    - root solving of the implicit line equation for rays (curve_intersects_ray)
    - Bezier clipping with fat lines for curve/curve intersections
      (curve_intersects_curve), with a bounding box subdivision search
      (curve_intersects_curve_bbox) as a slower reference
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from bezarith.basis import bezier_coefficients
from bezarith.bounds import Bounds
from bezarith.consts import (
    CLIP_SPLIT_RATIO,
    DEFAULT_ACCURACY,
    MAX_CLIP_DEPTH,
    MIN_CLIP_RANGE,
    SMALL_DISTANCE,
)
from bezarith.coordinate import Coord2
from bezarith.curve import BezierCurve, Curve
from bezarith.errors import MalformedPathError
from bezarith.fat_line import FatLine
from bezarith.line import (
    Line,
    as_line,
    clip_line_to_bounds,
    distance_to_line,
    line_coefficients_2d,
    line_length,
    line_pos_for_point,
)
from bezarith.section import CurveSection

logger = logging.getLogger(__name__)

# Roots with a larger imaginary part are not real intersections
_ROOT_IMAG_EPS: float = 1.0e-8
# Roots this far outside of [0, 1] are still accepted (and clamped)
_ROOT_T_EPS: float = 1.0e-8
# Curves whose control points all lie within this distance are points
_ZERO_LENGTH: float = 1.0e-12


def _check_accuracy(accuracy: float) -> None:
    if not accuracy > 0.0:
        raise MalformedPathError(f"accuracy must be positive, got {accuracy}")


###############################################################################
# Curve / line (bisection)
###############################################################################


def curve_intersects_line(
    curve: BezierCurve, line: Line, accuracy: float = DEFAULT_ACCURACY
) -> List[Tuple[float, float, Coord2]]:
    """
    Find where a curve crosses a line segment by bisection.

    The curve is split in half repeatedly. A half is dropped when its
    control points are all on one side of the line, or when the segment
    does not reach its bounding box. Once the bounds of a half are smaller
    than accuracy, the crossing of its chord with the line is reported.

    Near tangential intersections several neighbouring halves can survive,
    so more candidates than true roots may be returned. Candidates closer
    than accuracy to the previous one are merged.

    Args:
        curve: The curve to search.
        line: The segment (start, end).
        accuracy: Size of the bounds at which the search stops.

    Returns:
        List of (curve_t, line_t, position), ordered by curve_t. Lines without
        length, curves without length and curves lying on the line give [].
    """
    _check_accuracy(accuracy)
    curve = Curve.from_curve(curve)
    line = as_line(line)

    coefficients = line_coefficients_2d(line)
    if coefficients == (0.0, 0.0, 0.0):
        return []
    if curve.is_near_zero_length(_ZERO_LENGTH):
        return []

    distances = [distance_to_line(coefficients, p) for p in curve.all_points()]
    if all(abs(d) < SMALL_DISTANCE for d in distances):
        # Collinear: there is no single crossing point
        return []

    candidates: List[Tuple[float, float, Coord2]] = []
    _bisect_line(CurveSection(curve), line, coefficients, accuracy, candidates)
    candidates.sort(key=lambda candidate: candidate[0])

    merged: List[Tuple[float, float, Coord2]] = []
    for candidate in candidates:
        if merged and merged[-1][2].is_near_to(candidate[2], accuracy):
            continue
        merged.append(candidate)
    return merged


def _bisect_line(
    section: CurveSection,
    line: Line,
    coefficients: Tuple[float, float, float],
    accuracy: float,
    results: List[Tuple[float, float, Coord2]],
) -> None:
    sub_curve = section.section_curve
    distances = [distance_to_line(coefficients, p) for p in sub_curve.all_points()]

    # The curve lies inside the hull of its control points
    if all(d > 0.0 for d in distances) or all(d < 0.0 for d in distances):
        return

    bounds = sub_curve.fast_bounding_box()
    grown = Bounds(bounds.xmin - 1.0e-9, bounds.ymin - 1.0e-9, bounds.xmax + 1.0e-9, bounds.ymax + 1.0e-9)
    if clip_line_to_bounds(line, grown) is None:
        return

    if (bounds.width <= accuracy and bounds.height <= accuracy) or section.is_tiny():
        d_start, d_end = distances[0], distances[3]
        if d_start != d_end:
            local_t = min(max(d_start / (d_start - d_end), 0.0), 1.0)
        else:
            local_t = 0.5

        curve_t = section.original_curve_t_value(local_t)
        pos = section.curve.point_at_pos(curve_t)
        line_t = line_pos_for_point(line, pos)

        tolerance = accuracy / max(line_length(line), accuracy)
        if -tolerance <= line_t <= 1.0 + tolerance:
            results.append((curve_t, min(max(line_t, 0.0), 1.0), pos))
        return

    _bisect_line(section.subsection(0.0, 0.5), line, coefficients, accuracy, results)
    _bisect_line(section.subsection(0.5, 1.0), line, coefficients, accuracy, results)


###############################################################################
# Curve / ray (root solving)
###############################################################################


def curve_intersects_ray(curve: BezierCurve, ray: Line) -> List[Tuple[float, float, Coord2]]:
    """
    Find where a curve crosses the infinite line through ray.

    Substitutes the curve into the implicit line equation and solves the
    resulting cubic. The ray parameter is not restricted: 0 is ray[0],
    1 is ray[1], negative values lie behind the start.

    Returns:
        List of (curve_t, ray_t, position) with curve_t in [0, 1], ordered by curve_t.
    """
    curve = Curve.from_curve(curve)
    ray = as_line(ray)
    a, b, c = line_coefficients_2d(ray)
    if (a, b, c) == (0.0, 0.0, 0.0):
        return []

    xd, xc, xb, xa = bezier_coefficients(curve.start.x, curve.cp1.x, curve.cp2.x, curve.end.x)
    yd, yc, yb, ya = bezier_coefficients(curve.start.y, curve.cp1.y, curve.cp2.y, curve.end.y)

    coefficients = [a * xd + b * yd, a * xc + b * yc, a * xb + b * yb, a * xa + b * ya + c]

    scale = max(abs(value) for value in coefficients)
    if scale == 0.0:
        # The curve lies on the ray
        return []

    while coefficients and abs(coefficients[0]) <= 1.0e-12 * scale:
        coefficients.pop(0)
    if len(coefficients) < 2:
        return []

    results = []
    for root in np.roots(coefficients):
        if abs(root.imag) > _ROOT_IMAG_EPS:
            continue
        t = float(root.real)
        if t < -_ROOT_T_EPS or t > 1.0 + _ROOT_T_EPS:
            continue
        t = min(max(t, 0.0), 1.0)
        pos = curve.point_at_pos(t)
        results.append((t, line_pos_for_point(ray, pos), pos))

    results.sort(key=lambda result: result[0])
    return results


###############################################################################
# Overlapping curves
###############################################################################


def overlapping_region(
    curve1: BezierCurve, curve2: BezierCurve
) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """
    If curve2 runs along curve1, the t ranges where they overlap.

    Returns:
        ((c1_t1, c1_t2), (c2_t1, c2_t2)) with matching points at index 1 and
        at index 2, or None if the curves do not overlap.
    """
    curve1 = Curve.from_curve(curve1)
    curve2 = Curve.from_curve(curve2)
    c2_t1, c2_t2 = 0.0, 1.0

    c1_t1 = curve1.t_for_point(curve2.start)
    if c1_t1 is None:
        t = curve2.t_for_point(curve1.start)
        if t is None:
            return None
        c1_t1, c2_t1 = 0.0, t

    c1_t2 = curve1.t_for_point(curve2.end)
    if c1_t2 is None:
        t = curve2.t_for_point(curve1.end)
        if t is None:
            return None
        c1_t2, c2_t2 = 1.0, t

    if abs(c1_t1 - c1_t2) < 1.0e-9 or abs(c2_t1 - c2_t2) < 1.0e-9:
        # Only a single point in common
        return None

    # Straight lines: matching end points are enough
    coefficients = line_coefficients_2d((curve1.start, curve1.end))
    if coefficients != (0.0, 0.0, 0.0):
        if all(
            abs(distance_to_line(coefficients, p)) < SMALL_DISTANCE for p in curve1.all_points() + curve2.all_points()
        ):
            return ((c1_t1, c1_t2), (c2_t1, c2_t2))

    section1 = curve1.section(c1_t1, c1_t2)
    section2 = curve2.section(c2_t1, c2_t2)

    if section1.cp1.is_near_to(section2.cp1, SMALL_DISTANCE) and section1.cp2.is_near_to(
        section2.cp2, SMALL_DISTANCE
    ):
        return ((c1_t1, c1_t2), (c2_t1, c2_t2))
    return None


###############################################################################
# Curve / curve (Bezier clipping)
###############################################################################


def curve_intersects_curve(
    curve1: BezierCurve, curve2: BezierCurve, accuracy: float = DEFAULT_ACCURACY
) -> List[Tuple[float, float]]:
    """
    Find the intersections of two curves using Bezier clipping.

    Each curve is repeatedly clipped to the fat line of the other until both
    are shorter than accuracy. A curve that does not shrink by at least 20%
    in one step is split in half and both halves are searched.

    Curves that run along each other report the two ends of their common
    section. Curves without length have no intersections.

    Returns:
        List of (t1, t2) pairs ordered by t1.
    """
    _check_accuracy(accuracy)
    curve1 = Curve.from_curve(curve1)
    curve2 = Curve.from_curve(curve2)

    if curve1.is_near_zero_length(_ZERO_LENGTH) or curve2.is_near_zero_length(_ZERO_LENGTH):
        return []

    overlap = overlapping_region(curve1, curve2)
    if overlap is not None:
        (c1_t1, c1_t2), (c2_t1, c2_t2) = overlap
        return sorted([(c1_t1, c2_t1), (c1_t2, c2_t2)])

    if not curve1.fast_bounding_box().overlaps(curve2.fast_bounding_box(), accuracy):
        return []

    found = _clip_intersections(CurveSection(curve1), CurveSection(curve2), accuracy * accuracy)
    found.sort()

    results: List[Tuple[float, float]] = []
    for t1, t2 in found:
        if results and curve1.point_at_pos(results[-1][0]).is_near_to(curve1.point_at_pos(t1), accuracy):
            continue
        results.append((t1, t2))
    return results


def _clip(section_to_clip: CurveSection, section_against: CurveSection) -> Optional[Tuple[float, float]]:
    """t range of section_to_clip that can meet section_against, or None."""
    to_clip = section_to_clip.section_curve
    against = section_against.section_curve

    t_min, t_max = 0.0, 1.0
    for fat_line in (FatLine.from_curve(against), FatLine.from_curve_perpendicular(against)):
        if fat_line is None:
            continue
        clip_t = fat_line.clip_t(to_clip)
        if clip_t is None:
            return None
        t_min = max(t_min, clip_t[0])
        t_max = min(t_max, clip_t[1])

    if t_min > t_max:
        return None

    if t_max - t_min < MIN_CLIP_RANGE:
        center = (t_min + t_max) / 2.0
        t_min = max(0.0, center - MIN_CLIP_RANGE / 2.0)
        t_max = min(1.0, center + MIN_CLIP_RANGE / 2.0)

    return (t_min, t_max)


def _clip_intersections(
    section1: CurveSection, section2: CurveSection, accuracy_squared: float, depth: int = 0
) -> List[Tuple[float, float]]:
    len1 = section1.hull_length_sq()
    len2 = section2.hull_length_sq()

    iterations = 0
    while True:
        if len1 <= accuracy_squared and len2 <= accuracy_squared:
            break
        if depth + iterations > MAX_CLIP_DEPTH:
            logger.debug(
                "Clipping did not converge for t ranges %s and %s",
                section1.original_curve_t_values(),
                section2.original_curve_t_values(),
            )
            break
        iterations += 1

        if len2 > accuracy_squared:
            clip_t = _clip(section2, section1)
            if clip_t is None:
                return []
            section2 = section2.subsection(*clip_t)
            new_len2 = section2.hull_length_sq()

            if new_len2 > accuracy_squared and new_len2 > len2 * CLIP_SPLIT_RATIO:
                left = _clip_intersections(section1, section2.subsection(0.0, 0.5), accuracy_squared, depth + 1)
                right = _clip_intersections(section1, section2.subsection(0.5, 1.0), accuracy_squared, depth + 1)
                return left + right
            len2 = new_len2

        if len1 > accuracy_squared:
            clip_t = _clip(section1, section2)
            if clip_t is None:
                return []
            section1 = section1.subsection(*clip_t)
            new_len1 = section1.hull_length_sq()

            if new_len1 > accuracy_squared and new_len1 > len1 * CLIP_SPLIT_RATIO:
                left = _clip_intersections(section1.subsection(0.0, 0.5), section2, accuracy_squared, depth + 1)
                right = _clip_intersections(section1.subsection(0.5, 1.0), section2, accuracy_squared, depth + 1)
                return left + right
            len1 = new_len1

    accuracy = accuracy_squared**0.5
    if not section1.fast_bounding_box().overlaps(section2.fast_bounding_box(), accuracy):
        return []

    return [(section1.original_curve_t_value(0.5), section2.original_curve_t_value(0.5))]


###############################################################################
# Curve / curve (bounding box subdivision)
###############################################################################


def curve_intersects_curve_bbox(
    curve1: BezierCurve, curve2: BezierCurve, accuracy: float = DEFAULT_ACCURACY
) -> List[Tuple[float, float]]:
    """
    Find the intersections of two curves by subdividing until the bounding
    boxes of the overlapping halves are smaller than accuracy.

    Slower than Bezier clipping but simple; mostly useful as a cross check.
    """
    _check_accuracy(accuracy)
    curve1 = Curve.from_curve(curve1)
    curve2 = Curve.from_curve(curve2)

    if curve1.is_near_zero_length(_ZERO_LENGTH) or curve2.is_near_zero_length(_ZERO_LENGTH):
        return []

    found: List[Tuple[float, float]] = []
    pending = [(CurveSection(curve1), CurveSection(curve2))]
    while pending:
        section1, section2 = pending.pop()
        bounds1 = section1.section_curve.bounding_box()
        bounds2 = section2.section_curve.bounding_box()
        if not bounds1.overlaps(bounds2):
            continue

        small1 = (bounds1.width <= accuracy and bounds1.height <= accuracy) or section1.is_tiny()
        small2 = (bounds2.width <= accuracy and bounds2.height <= accuracy) or section2.is_tiny()
        if small1 and small2:
            found.append((section1.original_curve_t_value(0.5), section2.original_curve_t_value(0.5)))
            continue

        halves1 = [section1] if small1 else [section1.subsection(0.0, 0.5), section1.subsection(0.5, 1.0)]
        halves2 = [section2] if small2 else [section2.subsection(0.0, 0.5), section2.subsection(0.5, 1.0)]
        pending.extend((half1, half2) for half1 in halves1 for half2 in halves2)

    found.sort()
    results: List[Tuple[float, float]] = []
    for t1, t2 in found:
        if results and curve1.point_at_pos(results[-1][0]).is_near_to(curve1.point_at_pos(t1), accuracy * 2.0):
            continue
        results.append((t1, t2))
    return results
