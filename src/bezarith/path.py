"""
Bezier paths: a start point followed by a sequence of cubic segments.

Any object providing start_point() and points() is a path. points() yields
(control point 1, control point 2, end point) for every segment, the start of
each segment being the end of the previous one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Protocol, Sequence, Tuple, Union, runtime_checkable

import numpy as np

from bezarith.bounds import Bounds
from bezarith.consts import SMALL_DISTANCE
from bezarith.coordinate import Coord2, as_coord
from bezarith.curve import Curve
from bezarith.errors import MalformedPathError

# (control point 1, control point 2, end point)
PathSegment = Tuple[Coord2, Coord2, Coord2]

# Gauss-Legendre nodes on [0, 1]; 3 nodes integrate the degree 5 area integrand exactly
_GAUSS_NODES, _GAUSS_WEIGHTS = np.polynomial.legendre.leggauss(3)
_GAUSS_T = (_GAUSS_NODES + 1.0) / 2.0
_GAUSS_W = _GAUSS_WEIGHTS / 2.0


@runtime_checkable
class BezierPath(Protocol):
    """Anything with a start point and a sequence of cubic segments."""

    def start_point(self): ...

    def points(self) -> Iterable: ...


###############################################################################
# SimpleBezierPath
###############################################################################
@dataclass(frozen=True)
class SimpleBezierPath:
    """
    Immutable Bezier path.

    Attributes:
        start (Coord2): The first point of the path.
        segments (Tuple[PathSegment, ...]): (cp1, cp2, end) for every segment.
    """

    start: Coord2
    segments: Tuple[PathSegment, ...] = ()

    @classmethod
    def from_path(cls, path: Union[BezierPath, Tuple]) -> SimpleBezierPath:
        """Copy any path (or a (start, [(cp1, cp2, end), ...]) tuple) into a SimpleBezierPath."""
        if isinstance(path, SimpleBezierPath):
            return path
        if isinstance(path, tuple) and len(path) == 2:
            start, points = path
        elif isinstance(path, BezierPath):
            start, points = path.start_point(), path.points()
        else:
            raise MalformedPathError(f"Not a Bezier path: {path!r}")
        return cls(as_coord(start), tuple(_as_segment(segment) for segment in points))

    def start_point(self) -> Coord2:
        return self.start

    def points(self) -> Tuple[PathSegment, ...]:
        return self.segments

    def __len__(self) -> int:
        return len(self.segments)

    def end_point(self) -> Coord2:
        """The last point of the path (the start point for empty paths)."""
        if not self.segments:
            return self.start
        return self.segments[-1][2]

    def is_empty(self) -> bool:
        return not self.segments

    def to_curves(self) -> List[Curve]:
        return list(path_to_curves(self))


def _as_segment(segment) -> PathSegment:
    try:
        cp1, cp2, end = segment
    except (TypeError, ValueError) as err:
        raise MalformedPathError(f"A path segment needs (cp1, cp2, end), got {segment!r}") from err
    return (as_coord(cp1), as_coord(cp2), as_coord(end))


def as_bezier_path(path: Union[BezierPath, Tuple]) -> SimpleBezierPath:
    """Convert any supported path representation to a SimpleBezierPath."""
    return SimpleBezierPath.from_path(path)


###############################################################################
# BezierPathBuilder
###############################################################################
class BezierPathBuilder:
    """
    Builds a SimpleBezierPath segment by segment.

    Example:
        path = BezierPathBuilder.start(Coord2(0, 0)).line_to(Coord2(1, 0)).line_to(Coord2(1, 1)).build()
    """

    def __init__(self, start: Coord2):
        self._start = as_coord(start)
        self._segments: List[PathSegment] = []
        self._current = self._start

    @classmethod
    def start(cls, start) -> BezierPathBuilder:
        return cls(start)

    def line_to(self, point) -> BezierPathBuilder:
        """Straight segment to point."""
        end = as_coord(point)
        delta = end - self._current
        self._segments.append((self._current + delta * (1.0 / 3.0), self._current + delta * (2.0 / 3.0), end))
        self._current = end
        return self

    def curve_to(self, control_points, point) -> BezierPathBuilder:
        """Cubic segment to point with the given (cp1, cp2)."""
        cp1, cp2 = control_points
        end = as_coord(point)
        self._segments.append((as_coord(cp1), as_coord(cp2), end))
        self._current = end
        return self

    def close(self) -> BezierPathBuilder:
        """Add a straight segment back to the start if the path is not closed yet."""
        if not self._current.is_near_to(self._start, SMALL_DISTANCE):
            self.line_to(self._start)
        return self

    def build(self) -> SimpleBezierPath:
        return SimpleBezierPath(self._start, tuple(self._segments))


###############################################################################
# Path to curves
###############################################################################
class PathCurves:
    """
    The curves of a path, computed on demand.

    Iterating starts over from the first segment every time.
    """

    def __init__(self, path: BezierPath):
        self._path = path

    def __iter__(self) -> Iterator[Curve]:
        last_point = as_coord(self._path.start_point())
        for segment in self._path.points():
            cp1, cp2, end = _as_segment(segment)
            yield Curve(last_point, cp1, cp2, end)
            last_point = end


def path_to_curves(path: BezierPath) -> PathCurves:
    """Lazy, restartable sequence of the curves making up a path."""
    return PathCurves(path)


def path_from_curves(curves: Iterable[Curve]) -> SimpleBezierPath:
    """
    Join curves into a path. The start of each curve after the first is
    assumed to match the end of the previous one.

    An empty iterable gives an empty path at the origin.
    """
    curves = list(curves)
    if not curves:
        return SimpleBezierPath(Coord2.origin())
    return SimpleBezierPath(curves[0].start, tuple((c.cp1, c.cp2, c.end) for c in curves))


def path_from_points(points: Sequence, close: bool = True) -> SimpleBezierPath:
    """Polygon path through the given points (closed unless close is False)."""
    if not points:
        raise MalformedPathError("A polygon needs at least one point")
    builder = BezierPathBuilder.start(points[0])
    for point in points[1:]:
        builder.line_to(point)
    if close:
        builder.close()
    return builder.build()


###############################################################################
# Path analysis
###############################################################################


def path_bounding_box(path: BezierPath) -> Bounds:
    """
    Exact bounding box of a path, built from the bounds of every curve.

    A path without segments gives the degenerate box at the origin.
    """
    bounds = None
    for curve in path_to_curves(path):
        curve_bounds = curve.bounding_box()
        bounds = curve_bounds if bounds is None else bounds.union(curve_bounds)
    if bounds is None:
        return Bounds(0.0, 0.0, 0.0, 0.0)
    return bounds


def path_fast_bounding_box(path: BezierPath) -> Bounds:
    """Bounding box of all control points of the path."""
    if not isinstance(path, SimpleBezierPath):
        path = as_bezier_path(path)
    if path.is_empty():
        return Bounds(0.0, 0.0, 0.0, 0.0)
    return Bounds.from_points(_control_polygon(path))


def _control_polygon(path: SimpleBezierPath) -> List[Coord2]:
    points = [path.start]
    for cp1, cp2, end in path.segments:
        points.extend((cp1, cp2, end))
    return points


def is_clockwise(path: BezierPath) -> bool:
    """
    True if the path runs clockwise (with the y axis pointing up).

    Sums (x2 - x1) * (y2 + y1) over the control polygon, treated as closed.
    For self-intersecting paths the result follows whichever direction
    encloses more area.
    """
    if not isinstance(path, SimpleBezierPath):
        path = as_bezier_path(path)
    points = _control_polygon(path)
    points.append(points[0])

    total = 0.0
    for p1, p2 in zip(points, points[1:]):
        total += (p2.x - p1.x) * (p2.y + p1.y)
    return total >= 0.0


def path_signed_area(path: BezierPath) -> float:
    """
    Exact signed area enclosed by the path (closed with a straight line).

    Positive for anticlockwise paths.
    """
    total = 0.0
    curves = list(path_to_curves(path))
    if curves and not curves[-1].end.is_near_to(curves[0].start, 0.0):
        curves.append(Curve(curves[-1].end, curves[-1].end, curves[0].start, curves[0].start))
    for curve in curves:
        for t, weight in zip(_GAUSS_T, _GAUSS_W):
            point = curve.point_at_pos(float(t))
            tangent = curve.tangent_at_pos(float(t))
            total += float(weight) * (point.x * tangent.y - point.y * tangent.x)
    return total / 2.0


def path_is_closed(path: BezierPath, max_distance: float = SMALL_DISTANCE) -> bool:
    """True if the path ends (within max_distance) where it starts."""
    simple = as_bezier_path(path)
    return bool(simple.segments) and simple.end_point().is_near_to(simple.start, max_distance)


def path_reversed(path: BezierPath) -> SimpleBezierPath:
    """The same path, run backwards."""
    curves = [curve.reverse() for curve in path_to_curves(path)]
    curves.reverse()
    if not curves:
        return as_bezier_path(path)
    return path_from_curves(curves)


def path_translate(path: BezierPath, offset: Coord2) -> SimpleBezierPath:
    """The path moved by offset."""
    simple = as_bezier_path(path)
    return SimpleBezierPath(
        simple.start + offset,
        tuple((cp1 + offset, cp2 + offset, end + offset) for cp1, cp2, end in simple.segments),
    )


def as_path_list(paths) -> List[SimpleBezierPath]:
    """
    A single path or a sequence of paths (the sub-paths of one shape) as a list.

    A (start, points) tuple is read as a single path.
    """
    if isinstance(paths, SimpleBezierPath) or isinstance(paths, BezierPath):
        return [as_bezier_path(paths)]
    if isinstance(paths, tuple) and len(paths) == 2 and not isinstance(paths[0], (SimpleBezierPath, BezierPath)):
        try:
            return [as_bezier_path(paths)]
        except MalformedPathError:
            pass
    return [as_bezier_path(path) for path in paths]


def closed_curves(path: BezierPath) -> List[Curve]:
    """
    The curves of a path with a straight closing curve added if the end
    does not meet the start. Curves without length are left out.
    """
    curves = [curve for curve in path_to_curves(path) if not curve.is_near_zero_length(1.0e-12)]
    if curves and not curves[-1].end.is_near_to(curves[0].start, 1.0e-12):
        start, end = curves[-1].end, curves[0].start
        delta = end - start
        curves.append(Curve(start, start + delta * (1.0 / 3.0), start + delta * (2.0 / 3.0), end))
    return curves
