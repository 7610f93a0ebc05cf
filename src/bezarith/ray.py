"""Ray casting against Bezier paths: hit testing and point containment."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from bezarith.consts import DEFAULT_ACCURACY, SMALL_DISTANCE, FillRule
from bezarith.coordinate import Coord2, as_coord
from bezarith.curve import Curve
from bezarith.intersection import curve_intersects_curve, curve_intersects_ray
from bezarith.line import Line, line_coefficients_2d, line_length
from bezarith.path import BezierPath, as_path_list, closed_curves, path_fast_bounding_box, path_to_curves

logger = logging.getLogger(__name__)

# Directions tried in turn when a ray passes too close to a vertex or touches a curve
_RAY_ANGLES: Tuple[float, ...] = (0.3217, 1.1071, 2.0344, 2.7468, 3.6052, 4.3906, 5.1760, 5.8195)

# Crossings where the sine between ray and tangent is below this are tangential
_TANGENT_SINE: float = 1.0e-3


@dataclass(frozen=True)
class RayCast:
    """
    Outcome of casting a ray from a point.

    Attributes:
        crossings (int): Number of times the ray crosses the paths.
        winding (int): Sum of +1 for anticlockwise and -1 for clockwise crossings.
        on_boundary (bool): True if the point lies on one of the paths.
    """

    crossings: int
    winding: int
    on_boundary: bool

    def is_inside(self, fill_rule: FillRule = FillRule.EVEN_ODD) -> bool:
        """True if the point is inside (points on the boundary are not)."""
        if fill_rule == FillRule.NON_ZERO:
            return self.winding != 0
        return self.crossings % 2 == 1


def cast_ray_from_point(curves: Sequence[Curve], point: Coord2) -> RayCast:
    """
    Count the crossings of a ray starting at point with closed curve loops.

    A curve is counted over t in [0, 1) so that a crossing exactly at the
    joint of two curves is only seen once. Rays passing within
    SMALL_DISTANCE of a joint, or touching a curve tangentially, are retried
    in another direction.
    """
    for angle in _RAY_ANGLES:
        direction = Coord2(math.cos(angle), math.sin(angle))
        cast = _cast(curves, point, direction)
        if cast is not None:
            return cast

    logger.debug("Every ray from %s is ambiguous, using the last direction", point)
    direction = Coord2(math.cos(_RAY_ANGLES[-1]), math.sin(_RAY_ANGLES[-1]))
    return _cast(curves, point, direction, strict=False)


def _cast(curves: Sequence[Curve], point: Coord2, direction: Coord2, strict: bool = True) -> Optional[RayCast]:
    ray = (point, point + direction)
    coefficients = line_coefficients_2d(ray)

    crossings = 0
    winding = 0
    for curve in curves:
        if strict:
            # Joints close to the ray make the half open t range unreliable
            a, b, c = coefficients
            distance = a * curve.start.x + b * curve.start.y + c
            if abs(distance) < SMALL_DISTANCE and (curve.start - point).dot(direction) > -SMALL_DISTANCE:
                if curve.start.is_near_to(point, SMALL_DISTANCE):
                    return RayCast(0, 0, True)
                return None

        for curve_t, ray_t, pos in curve_intersects_ray(curve, ray):
            if pos.is_near_to(point, SMALL_DISTANCE):
                return RayCast(0, 0, True)
            if curve_t >= 1.0 or ray_t <= 0.0:
                continue

            tangent = curve.tangent_at_pos(curve_t)
            sine = direction.cross(tangent.to_unit_vector())
            if strict and abs(sine) < _TANGENT_SINE:
                return None

            crossings += 1
            winding += 1 if sine > 0.0 else -1

    return RayCast(crossings, winding, False)


def path_contains_point(paths, point, fill_rule: FillRule = FillRule.EVEN_ODD) -> bool:
    """
    True if point is inside the shape made of the given path(s).

    Args:
        paths: A path or a sequence of paths (sub-paths of one shape, such as
            an outline and its holes). Open paths are closed with a line.
        point: The point to test.
        fill_rule: EVEN_ODD or NON_ZERO.

    Points on the boundary count as inside.
    """
    point = as_coord(point)
    path_list = as_path_list(paths)

    if not any(path_fast_bounding_box(path).contains_point(point, SMALL_DISTANCE) for path in path_list):
        return False

    curves = [curve for path in path_list for curve in closed_curves(path)]
    cast = cast_ray_from_point(curves, point)
    return cast.on_boundary or cast.is_inside(fill_rule)


def path_intersects_ray(path: BezierPath, ray: Line) -> List[Tuple[int, float, float, Coord2]]:
    """
    Every point where the infinite line through ray meets the path.

    Returns:
        List of (curve_index, curve_t, ray_t, position), ordered along the path.
        Joints between curves are reported once.
    """
    if line_coefficients_2d(ray) == (0.0, 0.0, 0.0):
        return []

    results: List[Tuple[int, float, float, Coord2]] = []
    for index, curve in enumerate(path_to_curves(path)):
        for curve_t, ray_t, pos in curve_intersects_ray(curve, ray):
            if results and results[-1][3].is_near_to(pos, SMALL_DISTANCE):
                continue
            results.append((index, curve_t, ray_t, pos))
    # The end of a closed path is its start
    if len(results) > 1 and results[-1][3].is_near_to(results[0][3], SMALL_DISTANCE):
        results.pop()
    return results


def path_intersects_line(path: BezierPath, line: Line) -> List[Tuple[int, float, float, Coord2]]:
    """Like path_intersects_ray, restricted to points on the line segment."""
    tolerance = SMALL_DISTANCE / max(line_length(line), SMALL_DISTANCE)
    return [hit for hit in path_intersects_ray(path, line) if -tolerance <= hit[2] <= 1.0 + tolerance]


def path_intersects_path(
    path1: BezierPath, path2: BezierPath, accuracy: float = DEFAULT_ACCURACY
) -> List[Tuple[Tuple[int, float], Tuple[int, float]]]:
    """
    Every point where two paths meet.

    Returns:
        List of ((curve_index1, t1), (curve_index2, t2)).
    """
    curves2 = list(path_to_curves(path2))
    bounds2 = [curve.fast_bounding_box() for curve in curves2]

    results = []
    for index1, curve1 in enumerate(path_to_curves(path1)):
        bounds1 = curve1.fast_bounding_box()
        for index2, curve2 in enumerate(curves2):
            if not bounds1.overlaps(bounds2[index2], accuracy):
                continue
            for t1, t2 in curve_intersects_curve(curve1, curve2, accuracy):
                results.append(((index1, t1), (index2, t2)))
    return results
