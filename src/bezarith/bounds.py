"""Axis aligned bounding boxes"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from bezarith.coordinate import Coord2


###############################################################################
# Bounds
###############################################################################
@dataclass(frozen=True)
class Bounds:
    """
    Represents an axis aligned rectangle.

    Attributes:
        xmin (float): The minimum x-coordinate.
        ymin (float): The minimum y-coordinate.
        xmax (float): The maximum x-coordinate.
        ymax (float): The maximum y-coordinate.
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def __post_init__(self):
        # Normalize coordinates to ensure xmin <= xmax and ymin <= ymax
        if self.xmin > self.xmax:
            xmin, xmax = self.xmax, self.xmin
            object.__setattr__(self, "xmin", xmin)
            object.__setattr__(self, "xmax", xmax)
        if self.ymin > self.ymax:
            ymin, ymax = self.ymax, self.ymin
            object.__setattr__(self, "ymin", ymin)
            object.__setattr__(self, "ymax", ymax)

    @classmethod
    def from_min_max(cls, min_point: Coord2, max_point: Coord2) -> Bounds:
        """Box spanned by two corner points."""
        return cls(min_point.x, min_point.y, max_point.x, max_point.y)

    @classmethod
    def from_points(cls, points: Iterable[Coord2]) -> Bounds:
        """
        Smallest box containing all given points.

        An empty iterable gives the degenerate box at the origin.
        """
        iterator = iter(points)
        first = next(iterator, None)
        if first is None:
            return cls(0.0, 0.0, 0.0, 0.0)
        low = high = first
        for point in iterator:
            low = low.from_smallest_components(point)
            high = high.from_biggest_components(point)
        return cls.from_min_max(low, high)

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """The extent of the box as Tuple (xmin, ymin, xmax, ymax)."""
        return self.xmin, self.ymin, self.xmax, self.ymax

    @property
    def min_point(self) -> Coord2:
        """Lower left corner."""
        return Coord2(self.xmin, self.ymin)

    @property
    def max_point(self) -> Coord2:
        """Upper right corner."""
        return Coord2(self.xmax, self.ymax)

    @property
    def width(self) -> float:
        """float: The width of the box (difference between xmax and xmin)."""
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        """float: The height of the box (difference between ymax and ymin)."""
        return self.ymax - self.ymin

    @property
    def area(self) -> float:
        """float: The area of the box."""
        return self.width * self.height

    @property
    def centroid(self) -> Coord2:
        """The center of the box."""
        return Coord2((self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2)

    def union(self, other: Bounds) -> Bounds:
        """Smallest box containing both boxes."""
        return Bounds(
            min(self.xmin, other.xmin),
            min(self.ymin, other.ymin),
            max(self.xmax, other.xmax),
            max(self.ymax, other.ymax),
        )

    def overlaps(self, other: Bounds, tolerance: float = 0.0) -> bool:
        """True if the boxes touch or overlap, allowing a gap of up to tolerance."""
        return (
            self.xmin <= other.xmax + tolerance
            and other.xmin <= self.xmax + tolerance
            and self.ymin <= other.ymax + tolerance
            and other.ymin <= self.ymax + tolerance
        )

    def contains_point(self, point: Coord2, tolerance: float = 0.0) -> bool:
        """True if the point lies inside the box (or within tolerance of it)."""
        return (
            self.xmin - tolerance <= point.x <= self.xmax + tolerance
            and self.ymin - tolerance <= point.y <= self.ymax + tolerance
        )

    def __str__(self):
        return (
            f"Bounds(xmin={self.xmin}, ymin={self.ymin}, "
            f"xmax={self.xmax}, ymax={self.ymax}, "
            f"width={self.width}, height={self.height})"
        )
