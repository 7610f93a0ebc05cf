"""
Boolean arithmetic on shapes bounded by Bezier paths.

A shape is a path or a list of paths (its sub-paths, e.g. an outline and
the outlines of its holes). Inside is decided with the even-odd rule, so the
direction of the sub-paths does not matter. Results are lists of closed
paths: outlines run anticlockwise, holes clockwise.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from bezarith.consts import DEFAULT_ACCURACY, FillRule
from bezarith.errors import MalformedPathError
from bezarith.graph_path import GraphPath, PathSource, graph_from_operands
from bezarith.path import SimpleBezierPath, as_path_list, path_bounding_box

logger = logging.getLogger(__name__)


def _non_empty(paths) -> List[SimpleBezierPath]:
    return [path for path in as_path_list(paths) if not path.is_empty()]


def _bounds_overlap(paths1: List[SimpleBezierPath], paths2: List[SimpleBezierPath], accuracy: float) -> bool:
    bounds1 = path_bounding_box(paths1[0])
    for path in paths1[1:]:
        bounds1 = bounds1.union(path_bounding_box(path))
    bounds2 = path_bounding_box(paths2[0])
    for path in paths2[1:]:
        bounds2 = bounds2.union(path_bounding_box(path))
    return bounds1.overlaps(bounds2, accuracy)


def _check_accuracy(accuracy: float) -> None:
    if not accuracy > 0.0:
        raise MalformedPathError(f"accuracy must be positive, got {accuracy}")


def path_combine(
    path1, path2, rule: Callable[[bool, bool], bool], accuracy: float = DEFAULT_ACCURACY
) -> List[SimpleBezierPath]:
    """
    Combine two shapes with an arbitrary rule.

    Args:
        path1: First shape (path or list of sub-paths).
        path2: Second shape.
        rule: Receives (inside path1, inside path2) and returns whether the
            point belongs to the result.
        accuracy: Tolerance for intersections.
    """
    _check_accuracy(accuracy)
    graph = graph_from_operands(path1, path2, accuracy)
    graph.set_exterior_by_rule(rule, accuracy)
    result = graph.exterior_paths()
    logger.debug("Combined %d and %d paths into %d", len(as_path_list(path1)), len(as_path_list(path2)), len(result))
    return result


def path_add(path1, path2, accuracy: float = DEFAULT_ACCURACY) -> List[SimpleBezierPath]:
    """
    Union of two shapes.

    An empty shape leaves the other one unchanged, and so do shapes that
    are too far apart to touch: both are returned as they are.
    """
    paths1 = _non_empty(path1)
    paths2 = _non_empty(path2)
    if not paths1 or not paths2:
        return paths1 + paths2
    if not _bounds_overlap(paths1, paths2, accuracy):
        return paths1 + paths2
    return path_combine(paths1, paths2, lambda in1, in2: in1 or in2, accuracy)


def path_intersect(path1, path2, accuracy: float = DEFAULT_ACCURACY) -> List[SimpleBezierPath]:
    """Intersection of two shapes. Empty or distant shapes give []."""
    paths1 = _non_empty(path1)
    paths2 = _non_empty(path2)
    if not paths1 or not paths2:
        return []
    if not _bounds_overlap(paths1, paths2, accuracy):
        return []
    return path_combine(paths1, paths2, lambda in1, in2: in1 and in2, accuracy)


def path_sub(path1, path2, accuracy: float = DEFAULT_ACCURACY) -> List[SimpleBezierPath]:
    """
    path1 with path2 cut away.

    Subtracting an empty or distant shape returns path1 unchanged.
    """
    paths1 = _non_empty(path1)
    paths2 = _non_empty(path2)
    if not paths1:
        return []
    if not paths2 or not _bounds_overlap(paths1, paths2, accuracy):
        return paths1
    return path_combine(paths1, paths2, lambda in1, in2: in1 and not in2, accuracy)


def path_remove_interior_points(path, accuracy: float = DEFAULT_ACCURACY) -> List[SimpleBezierPath]:
    """
    Outline of a shape with every edge that is inside the shape removed.

    Self-overlapping paths are cut where they cross themselves and filled
    with the non-zero rule, so loops drawn in the same direction merge.
    """
    _check_accuracy(accuracy)
    paths = _non_empty(path)
    if not paths:
        return []

    graph = GraphPath.from_paths(paths, PathSource.PATH1).self_collide(accuracy)
    graph.set_exterior_by_rule(lambda in1, _in2: in1, accuracy, FillRule.NON_ZERO)
    return graph.exterior_paths()
