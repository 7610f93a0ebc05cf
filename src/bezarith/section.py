"""Sections of cubic Bezier curves"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from bezarith.bounds import Bounds
from bezarith.consts import SMALL_T_DISTANCE
from bezarith.coordinate import Coord2
from bezarith.curve import Curve


@dataclass(frozen=True)
class CurveSection:
    """
    The part of a curve between t_min and t_max.

    Keeps track of where it lies on the curve it was cut from, so that
    nested sections can translate their own parameters back to the original.

    Attributes:
        curve (Curve): The curve this section was cut from.
        t_min (float): Start of the section on the original curve.
        t_max (float): End of the section on the original curve.
    """

    curve: Curve
    t_min: float = 0.0
    t_max: float = 1.0
    section_curve: Curve = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.t_min == 0.0 and self.t_max == 1.0:
            sub = self.curve
        else:
            sub = self.curve.section(self.t_min, self.t_max)
        object.__setattr__(self, "section_curve", sub)

    def subsection(self, t_min: float, t_max: float) -> CurveSection:
        """A section of this section (t values relative to this section)."""
        return CurveSection(self.curve, self.original_curve_t_value(t_min), self.original_curve_t_value(t_max))

    def original_curve_t_value(self, t: float) -> float:
        """Map a parameter on this section to the parameter on the original curve."""
        return self.t_min + (self.t_max - self.t_min) * t

    def original_curve_t_values(self) -> Tuple[float, float]:
        """(t_min, t_max) on the original curve."""
        return (self.t_min, self.t_max)

    def is_tiny(self) -> bool:
        """True if the t range of this section has (almost) collapsed."""
        return abs(self.t_max - self.t_min) < SMALL_T_DISTANCE

    def start_point(self) -> Coord2:
        return self.section_curve.start

    def control_points(self) -> Tuple[Coord2, Coord2]:
        return (self.section_curve.cp1, self.section_curve.cp2)

    def end_point(self) -> Coord2:
        return self.section_curve.end

    def point_at_pos(self, t: float) -> Coord2:
        return self.section_curve.point_at_pos(t)

    def fast_bounding_box(self) -> Bounds:
        return self.section_curve.fast_bounding_box()

    def hull_length_sq(self) -> float:
        """
        Sum of the squared lengths of the control polygon legs.

        Tiny sections count as 0 so that they always converge.
        """
        if self.is_tiny():
            return 0.0
        sub = self.section_curve
        return sum(
            (b - a).dot(b - a) for a, b in ((sub.start, sub.cp1), (sub.cp1, sub.cp2), (sub.cp2, sub.end))
        )
