"""Circles and circular arcs approximated by cubic Bezier curves."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from bezarith.coordinate import Coord2, as_coord
from bezarith.curve import Curve
from bezarith.path import SimpleBezierPath, path_from_curves


@dataclass(frozen=True)
class CircularArc:
    """
    Part of a circle, running anticlockwise from start_radians to end_radians.

    Arcs of up to 90 degrees convert to a single curve with a radius
    error below 0.03%.
    """

    center: Coord2
    radius: float
    start_radians: float
    end_radians: float

    def point_at_angle(self, radians: float) -> Coord2:
        return Coord2(self.center.x + self.radius * math.cos(radians), self.center.y + self.radius * math.sin(radians))

    def to_bezier_curve(self) -> Curve:
        """Single cubic curve approximating the arc."""
        theta = self.end_radians - self.start_radians
        handle = 4.0 / 3.0 * math.tan(theta / 4.0) * self.radius

        start = self.point_at_angle(self.start_radians)
        end = self.point_at_angle(self.end_radians)
        start_tangent = Coord2(-math.sin(self.start_radians), math.cos(self.start_radians))
        end_tangent = Coord2(-math.sin(self.end_radians), math.cos(self.end_radians))

        return Curve(start, start + start_tangent * handle, end - end_tangent * handle, end)

    def to_curves(self) -> List[Curve]:
        """The arc as curves of at most 90 degrees each."""
        theta = self.end_radians - self.start_radians
        count = max(1, math.ceil(abs(theta) / (math.pi / 2.0) - 1.0e-9))
        step = theta / count
        return [
            CircularArc(
                self.center, self.radius, self.start_radians + step * index, self.start_radians + step * (index + 1)
            ).to_bezier_curve()
            for index in range(count)
        ]


@dataclass(frozen=True)
class Circle:
    """A circle, convertible to four Bezier curves."""

    center: Coord2
    radius: float

    def __post_init__(self):
        object.__setattr__(self, "center", as_coord(self.center))

    def arc(self, start_radians: float, end_radians: float) -> CircularArc:
        return CircularArc(self.center, self.radius, start_radians, end_radians)

    def to_curves(self) -> List[Curve]:
        """Four quarter arcs, anticlockwise, starting at 45 degrees."""
        start_angle = math.pi / 4.0
        section_angle = math.pi / 2.0
        return [
            self.arc(start_angle + section_angle * index, start_angle + section_angle * (index + 1)).to_bezier_curve()
            for index in range(4)
        ]

    def to_path(self) -> SimpleBezierPath:
        """Closed anticlockwise path around the circle."""
        curves = self.to_curves()
        path = path_from_curves(curves)
        # Close exactly, the last arc ends at the start up to rounding
        cp1, cp2, _ = path.segments[-1]
        return SimpleBezierPath(path.start, path.segments[:-1] + ((cp1, cp2, path.start),))
