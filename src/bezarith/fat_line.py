"""Fat lines for Bezier clipping"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from bezarith.consts import CLIP_T_PADDING
from bezarith.coordinate import Coord2
from bezarith.curve import Curve
from bezarith.line import distance_to_line, line_coefficients_2d

# Below this length a curve's chord has no usable direction
_DEGENERATE_CHORD: float = 1.0e-9


###############################################################################
# FatLine
###############################################################################
@dataclass(frozen=True)
class FatLine:
    """
    A line with a thickness: every point of the source curve has a signed
    distance in [d_min, d_max] from the line a*x + b*y + c = 0.

    Attributes:
        a (float): x coefficient of the normalized line equation.
        b (float): y coefficient of the normalized line equation.
        c (float): Constant of the normalized line equation.
        d_min (float): Smallest signed distance of the band.
        d_max (float): Largest signed distance of the band.
    """

    a: float
    b: float
    c: float
    d_min: float
    d_max: float

    @classmethod
    def from_curve(cls, curve: Curve) -> Optional[FatLine]:
        """
        Fat line along the chord of the curve.

        Uses the tighter bounds of Sederberg and Nishita: 3/4 of the control
        point distances if both control points are on the same side of the
        chord, 4/9 otherwise. If the chord has no length the line through the
        start and the farthest control point is used with exact bounds. A
        curve collapsed into a single point gives None.
        """
        start, cp1, cp2, end = curve.all_points()

        if start.distance_to(end) > _DEGENERATE_CHORD:
            coefficients = line_coefficients_2d((start, end))
            d1 = distance_to_line(coefficients, cp1)
            d2 = distance_to_line(coefficients, cp2)
            factor = 3.0 / 4.0 if d1 * d2 > 0.0 else 4.0 / 9.0
            a, b, c = coefficients
            return cls(a, b, c, factor * min(d1, d2, 0.0), factor * max(d1, d2, 0.0))

        farthest = max((cp1, cp2), key=start.distance_to)
        if start.distance_to(farthest) <= _DEGENERATE_CHORD:
            return None
        return cls._exact((start, farthest), curve)

    @classmethod
    def from_curve_perpendicular(cls, curve: Curve) -> Optional[FatLine]:
        """Fat line through the start of the curve, perpendicular to its chord."""
        start, end = curve.start, curve.end
        if start.distance_to(end) <= _DEGENERATE_CHORD:
            return None
        direction = (end - start).rotate_90()
        return cls._exact((start, start + direction), curve)

    @classmethod
    def _exact(cls, line: Tuple[Coord2, Coord2], curve: Curve) -> FatLine:
        a, b, c = line_coefficients_2d(line)
        distances = [distance_to_line((a, b, c), p) for p in curve.all_points()]
        return cls(a, b, c, min(distances), max(distances))

    def distance(self, point: Coord2) -> float:
        """Signed distance of a point from the center line."""
        return self.a * point.x + self.b * point.y + self.c

    def clip_t(self, curve: Curve) -> Optional[Tuple[float, float]]:
        """
        Range of t for which the curve can be inside this fat line.

        The distances of the control points form a non-parametric Bezier
        curve (i/3, d_i); its convex hull is intersected with the band
        [d_min, d_max]. Returns None if the hull misses the band.
        """
        distance_points = [(i / 3.0, self.distance(p)) for i, p in enumerate(curve.all_points())]

        t_min = float("inf")
        t_max = float("-inf")

        for index, (t, d) in enumerate(distance_points):
            if self.d_min <= d <= self.d_max:
                t_min = min(t_min, t)
                t_max = max(t_max, t)

            # Every pair of points, so the hull edges are always included
            for t_other, d_other in distance_points[index + 1 :]:
                clipped = _clip_segment_to_band(t, d, t_other, d_other, self.d_min, self.d_max)
                if clipped is not None:
                    t_min = min(t_min, clipped[0])
                    t_max = max(t_max, clipped[1])

        if t_min > t_max:
            return None

        return (max(0.0, t_min - CLIP_T_PADDING), min(1.0, t_max + CLIP_T_PADDING))


def _clip_segment_to_band(
    t0: float, d0: float, t1: float, d1: float, d_min: float, d_max: float
) -> Optional[Tuple[float, float]]:
    """t range of the segment (t0, d0)-(t1, d1) where d lies within [d_min, d_max]."""
    if d0 == d1:
        if d_min <= d0 <= d_max:
            return (min(t0, t1), max(t0, t1))
        return None

    s_low = (d_min - d0) / (d1 - d0)
    s_high = (d_max - d0) / (d1 - d0)
    if s_low > s_high:
        s_low, s_high = s_high, s_low

    s_low = max(s_low, 0.0)
    s_high = min(s_high, 1.0)
    if s_low > s_high:
        return None

    ta = t0 + (t1 - t0) * s_low
    tb = t0 + (t1 - t0) * s_high
    return (min(ta, tb), max(ta, tb))
