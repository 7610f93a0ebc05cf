"""Two dimensional coordinates used as control points and path positions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Protocol, Sequence, Tuple, Union, runtime_checkable

from bezarith.errors import MalformedPathError


@runtime_checkable
class Coordinate(Protocol):
    """Anything with readable x and y components can be used as a point."""

    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...


###############################################################################
# Coord2
###############################################################################
@dataclass(frozen=True)
class Coord2:
    """
    Immutable 2D vector.

    Attributes:
        x (float): The x component.
        y (float): The y component.
    """

    x: float
    y: float

    @classmethod
    def origin(cls) -> Coord2:
        """The point (0, 0)."""
        return cls(0.0, 0.0)

    def __add__(self, other: Coord2) -> Coord2:
        return Coord2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Coord2) -> Coord2:
        return Coord2(self.x - other.x, self.y - other.y)

    def __mul__(self, scale: float) -> Coord2:
        return Coord2(self.x * scale, self.y * scale)

    __rmul__ = __mul__

    def __truediv__(self, scale: float) -> Coord2:
        return Coord2(self.x / scale, self.y / scale)

    def __neg__(self) -> Coord2:
        return Coord2(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def dot(self, other: Coord2) -> float:
        """Dot product with another vector."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Coord2) -> float:
        """z component of the 3D cross product (positive if other is to the left)."""
        return self.x * other.y - self.y * other.x

    def magnitude(self) -> float:
        """Length of the vector."""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Coord2) -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_unit_vector(self) -> Coord2:
        """
        Normalized copy of this vector.

        A zero vector has no direction and is returned unchanged.
        """
        length = self.magnitude()
        if length == 0.0:
            return Coord2(0.0, 0.0)
        return Coord2(self.x / length, self.y / length)

    def from_smallest_components(self, other: Coord2) -> Coord2:
        """Component-wise minimum."""
        return Coord2(min(self.x, other.x), min(self.y, other.y))

    def from_biggest_components(self, other: Coord2) -> Coord2:
        """Component-wise maximum."""
        return Coord2(max(self.x, other.x), max(self.y, other.y))

    def is_near_to(self, other: Coord2, max_distance: float) -> bool:
        """True if the other point is within max_distance of this one."""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy <= max_distance * max_distance

    def rotate_90(self) -> Coord2:
        """This vector rotated anticlockwise by 90 degrees."""
        return Coord2(-self.y, self.x)

    def to_tuple(self) -> Tuple[float, float]:
        """The point as (x, y) tuple."""
        return (self.x, self.y)


def as_coord(value: Union[Coordinate, Sequence[float], Any]) -> Coord2:
    """
    Convert a point-like value to a Coord2.

    Accepts Coord2, any object with x and y attributes, or a sequence of two numbers.

    Raises:
        MalformedPathError: If the value cannot be read as a point.
    """
    if isinstance(value, Coord2):
        return value
    if hasattr(value, "x") and hasattr(value, "y"):
        x_val, y_val = value.x, value.y
        # Accessor methods are accepted too
        if callable(x_val):
            x_val = x_val()
        if callable(y_val):
            y_val = y_val()
        return Coord2(float(x_val), float(y_val))
    try:
        if len(value) == 2:
            return Coord2(float(value[0]), float(value[1]))
    except (TypeError, ValueError) as err:
        raise MalformedPathError(f"Not a point: {value!r}") from err
    raise MalformedPathError(f"A point needs exactly two components, got {value!r}")
