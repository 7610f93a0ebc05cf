"""
Planar graphs of Bezier paths, used to implement path arithmetic.

A GraphPath holds its nodes and edges in two lists (arenas) and refers to
them by index only. The steps of a boolean operation are:

    1. ingest:    GraphPath.from_paths() for every operand
    2. intersect: collide() merges two graphs and cuts every edge where it
                  meets another one, so that no two edges cross
    3. classify:  every edge is tested on both of its sides to find out
                  which operands are on its left and on its right
    4. combine:   set_exterior_by_rule() keeps the edges where the rule
                  changes between the two sides
    5. walk:      exterior_paths() joins the kept edges into closed paths
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import KDTree

from bezarith.consts import CLOSE_DISTANCE, DEFAULT_ACCURACY, SMALL_DISTANCE, FillRule
from bezarith.coordinate import Coord2
from bezarith.curve import Curve
from bezarith.intersection import curve_intersects_curve, curve_intersects_ray
from bezarith.line import Line
from bezarith.path import SimpleBezierPath, as_path_list, closed_curves, is_clockwise
from bezarith.ray import cast_ray_from_point

logger = logging.getLogger(__name__)


###############################################################################
# Labels
###############################################################################


class PathSource(Enum):
    """Which operand an edge came from."""

    PATH1 = auto()
    PATH2 = auto()


class PathDirection(Enum):
    """Winding direction of the sub-path an edge came from."""

    CLOCKWISE = auto()
    ANTICLOCKWISE = auto()


@dataclass(frozen=True)
class PathLabel:
    """
    Source and direction of an edge.

    The direction records how the originating sub-path was drawn, for callers
    inspecting the graph. Classification does not read it: set_exterior_by_rule
    decides inside and outside by casting rays against the operand shapes, so
    the result does not depend on the direction of the sub-paths.
    """

    source: PathSource
    direction: PathDirection


class GraphPathEdgeKind(Enum):
    """Classification of an edge."""

    UNCATEGORISED = auto()
    EXTERIOR = auto()
    INTERIOR = auto()


###############################################################################
# Nodes and edges
###############################################################################


@dataclass
class GraphPathEdge:
    """
    A curve from the node start_idx to the node end_idx.

    Attributes:
        label (PathLabel): Where the edge came from.
        start_idx (int): Index of the start node.
        cp1 (Coord2): First control point.
        cp2 (Coord2): Second control point.
        end_idx (int): Index of the end node.
        kind (GraphPathEdgeKind): Set during classification.
    """

    label: PathLabel
    start_idx: int
    cp1: Coord2
    cp2: Coord2
    end_idx: int
    kind: GraphPathEdgeKind = GraphPathEdgeKind.UNCATEGORISED


@dataclass
class GraphPathPoint:
    """A node of the graph with the indices of the edges leaving it."""

    position: Coord2
    forward_edges: List[int] = field(default_factory=list)


class _NodeMerger:
    """Union-find over node indices."""

    def __init__(self, count: int):
        self._parent = list(range(count))

    def add(self) -> int:
        self._parent.append(len(self._parent))
        return len(self._parent) - 1

    def find(self, index: int) -> int:
        parent = self._parent
        while parent[index] != index:
            parent[index] = parent[parent[index]]
            index = parent[index]
        return index

    def union(self, index1: int, index2: int) -> None:
        root1, root2 = self.find(index1), self.find(index2)
        if root1 != root2:
            # The lower index survives, so original path points win over cut points
            if root2 < root1:
                root1, root2 = root2, root1
            self._parent[root2] = root1


###############################################################################
# GraphPath
###############################################################################
class GraphPath:
    """
    Planar graph made of the edges of one or two shapes.

    Every operand is kept as a list of sub-paths too, so that points can
    be tested against the original shapes during classification.
    """

    def __init__(self):
        self.points: List[GraphPathPoint] = []
        self.edges: List[GraphPathEdge] = []
        self.shapes: Dict[PathSource, List[SimpleBezierPath]] = {PathSource.PATH1: [], PathSource.PATH2: []}

    def __repr__(self) -> str:
        return f"GraphPath(points={len(self.points)}, edges={len(self.edges)})"

    ###########################################################################
    # Ingest
    ###########################################################################

    @classmethod
    def from_path(cls, path, source: PathSource = PathSource.PATH1) -> GraphPath:
        """Graph of a single path. The path is treated as closed."""
        return cls.from_paths([path], source)

    @classmethod
    def from_paths(cls, paths, source: PathSource = PathSource.PATH1) -> GraphPath:
        """
        Graph of a shape made of several sub-paths.

        Every sub-path becomes a loop of edges, closed with a straight edge
        if it does not end at its start. Segments without length are skipped.
        """
        graph = cls()
        for path in as_path_list(paths):
            graph._add_loop(path, source)
        return graph

    def _add_loop(self, path: SimpleBezierPath, source: PathSource) -> None:
        curves = closed_curves(path)
        if not curves:
            return

        direction = PathDirection.CLOCKWISE if is_clockwise(path) else PathDirection.ANTICLOCKWISE
        label = PathLabel(source, direction)
        self.shapes[source].append(path)

        first_idx = len(self.points)
        self.points.append(GraphPathPoint(curves[0].start))
        for index, curve in enumerate(curves):
            start_idx = len(self.points) - 1
            if index == len(curves) - 1:
                end_idx = first_idx
            else:
                end_idx = len(self.points)
                self.points.append(GraphPathPoint(curve.end))
            self._add_edge(GraphPathEdge(label, start_idx, curve.cp1, curve.cp2, end_idx))

    def _add_edge(self, edge: GraphPathEdge) -> int:
        edge_idx = len(self.edges)
        self.edges.append(edge)
        self.points[edge.start_idx].forward_edges.append(edge_idx)
        return edge_idx

    def merge(self, other: GraphPath) -> GraphPath:
        """A new graph holding the nodes and edges of both graphs (not connected yet)."""
        merged = GraphPath()
        for graph in (self, other):
            point_offset = len(merged.points)
            for point in graph.points:
                merged.points.append(GraphPathPoint(point.position))
            for edge in graph.edges:
                merged._add_edge(
                    replace(edge, start_idx=edge.start_idx + point_offset, end_idx=edge.end_idx + point_offset)
                )
            for source, shape in graph.shapes.items():
                merged.shapes[source].extend(shape)
        return merged

    ###########################################################################
    # Access
    ###########################################################################

    def num_points(self) -> int:
        return len(self.points)

    def edge_curve(self, edge_idx: int) -> Curve:
        """The curve of an edge."""
        edge = self.edges[edge_idx]
        return Curve(self.points[edge.start_idx].position, edge.cp1, edge.cp2, self.points[edge.end_idx].position)

    def edges_for_point(self, point_idx: int) -> List[GraphPathEdge]:
        """The edges leaving a node."""
        return [self.edges[edge_idx] for edge_idx in self.points[point_idx].forward_edges]

    def ray_collisions(self, ray: Line) -> List[Tuple[int, float, float, Coord2]]:
        """
        Every point where the infinite line through ray meets an edge.

        Returns:
            List of (edge_idx, curve_t, ray_t, position) ordered by ray_t.
        """
        collisions = []
        for edge_idx in range(len(self.edges)):
            for curve_t, ray_t, pos in curve_intersects_ray(self.edge_curve(edge_idx), ray):
                collisions.append((edge_idx, curve_t, ray_t, pos))
        collisions.sort(key=lambda collision: collision[2])
        return collisions

    ###########################################################################
    # Intersect
    ###########################################################################

    def collide(self, other: GraphPath, accuracy: float = DEFAULT_ACCURACY) -> GraphPath:
        """
        Merge with another graph and cut the edges at every point where an
        edge of one graph meets an edge of the other.
        """
        merged = self.merge(other)
        merged._collide_edges(accuracy, same_source=False)
        return merged

    def self_collide(self, accuracy: float = DEFAULT_ACCURACY) -> GraphPath:
        """Cut the edges at every point where any two edges meet (in place)."""
        self._collide_edges(accuracy, same_source=True)
        return self

    def _collide_edges(self, accuracy: float, same_source: bool) -> None:
        snap_distance = max(CLOSE_DISTANCE, accuracy)
        merger = _NodeMerger(len(self.points))
        splits: Dict[int, List[Tuple[float, int]]] = {}

        curves = [self.edge_curve(edge_idx) for edge_idx in range(len(self.edges))]
        bounds = [curve.fast_bounding_box() for curve in curves]

        collisions = 0
        for idx1, curve1 in enumerate(curves):
            for idx2 in range(idx1 + 1, len(curves)):
                if not same_source and self.edges[idx1].label.source == self.edges[idx2].label.source:
                    continue
                if not bounds[idx1].overlaps(bounds[idx2], accuracy):
                    continue

                for t1, t2 in curve_intersects_curve(curve1, curves[idx2], accuracy):
                    position = curve1.point_at_pos(t1)
                    node1 = self._node_for_cut(idx1, t1, position, snap_distance, merger, splits)
                    node2 = self._node_for_cut(idx2, t2, position, snap_distance, merger, splits)
                    merger.union(node1, node2)
                    collisions += 1

        logger.debug("Found %d collisions between %d edges", collisions, len(self.edges))

        self._split_edges(splits, merger)
        self._merge_close_points(merger)
        self._compact(merger)

    def _node_for_cut(
        self,
        edge_idx: int,
        t: float,
        position: Coord2,
        snap_distance: float,
        merger: _NodeMerger,
        splits: Dict[int, List[Tuple[float, int]]],
    ) -> int:
        """The node where an edge is cut at t: one of its end nodes if close enough, a new node otherwise."""
        edge = self.edges[edge_idx]
        if self.points[edge.start_idx].position.is_near_to(position, snap_distance):
            return edge.start_idx
        if self.points[edge.end_idx].position.is_near_to(position, snap_distance):
            return edge.end_idx

        node_idx = len(self.points)
        self.points.append(GraphPathPoint(position))
        merger.add()
        splits.setdefault(edge_idx, []).append((t, node_idx))
        return node_idx

    def _split_edges(self, splits: Dict[int, List[Tuple[float, int]]], merger: _NodeMerger) -> None:
        for edge_idx, edge_splits in splits.items():
            edge = self.edges[edge_idx]
            curve = self.edge_curve(edge_idx)

            cuts = [(0.0, edge.start_idx)] + sorted(edge_splits) + [(1.0, edge.end_idx)]
            pieces = []
            for (t_start, node_start), (t_end, node_end) in zip(cuts, cuts[1:]):
                if t_end - t_start < 1.0e-9:
                    merger.union(node_start, node_end)
                    continue
                section = curve.section(t_start, t_end)
                pieces.append(replace(edge, start_idx=node_start, cp1=section.cp1, cp2=section.cp2, end_idx=node_end))

            if not pieces:
                continue
            self.edges[edge_idx] = pieces[0]
            self.edges.extend(pieces[1:])

    def _merge_close_points(self, merger: _NodeMerger) -> None:
        if len(self.points) < 2:
            return
        positions = np.array([point.position.to_tuple() for point in self.points], dtype=np.float64)
        tree = KDTree(positions)
        for idx1, idx2 in tree.query_pairs(r=CLOSE_DISTANCE):
            merger.union(idx1, idx2)

    def _compact(self, merger: _NodeMerger) -> None:
        """Rebuild the arenas after merging nodes, dropping edges that collapsed to a point."""
        mapping: Dict[int, int] = {}
        points: List[GraphPathPoint] = []
        for point_idx in range(len(self.points)):
            root = merger.find(point_idx)
            if root not in mapping:
                mapping[root] = len(points)
                points.append(GraphPathPoint(self.points[root].position))

        old_edges = self.edges
        self.points = points
        self.edges = []
        for edge in old_edges:
            start_idx = mapping[merger.find(edge.start_idx)]
            end_idx = mapping[merger.find(edge.end_idx)]
            if start_idx == end_idx:
                position = points[start_idx].position
                loop = Curve(position, edge.cp1, edge.cp2, position)
                if loop.control_polygon_length() <= 2.0 * CLOSE_DISTANCE:
                    continue
            self._add_edge(replace(edge, start_idx=start_idx, end_idx=end_idx))

    ###########################################################################
    # Classify and combine
    ###########################################################################

    def set_exterior_by_rule(
        self,
        rule: Callable[[bool, bool], bool],
        accuracy: float = DEFAULT_ACCURACY,
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> None:
        """
        Mark the edges on the boundary of the area selected by rule as exterior.

        rule receives (inside path 1, inside path 2) and returns whether that
        point belongs to the result. An edge is exterior if the rule gives
        different answers just left and just right of it. Exterior edges are
        turned around where needed so that the result is always on their left,
        and edges running along another exterior edge are only kept once.
        """
        side_distance = max(0.5 * accuracy, SMALL_DISTANCE)
        operands = {source: [c for path in shape for c in closed_curves(path)] for source, shape in self.shapes.items()}

        def inside(point: Coord2) -> Tuple[bool, bool]:
            result = []
            for source in (PathSource.PATH1, PathSource.PATH2):
                cast = cast_ray_from_point(operands[source], point)
                result.append(cast.on_boundary or cast.is_inside(fill_rule))
            return (result[0], result[1])

        for edge_idx in range(len(self.edges)):
            curve = self.edge_curve(edge_idx)
            middle = curve.point_at_pos(0.5)
            normal = curve.unit_normal_at_pos(0.5)

            selected_left = rule(*inside(middle + normal * side_distance))
            selected_right = rule(*inside(middle - normal * side_distance))

            if selected_left == selected_right:
                self.edges[edge_idx].kind = GraphPathEdgeKind.INTERIOR
                continue

            self.edges[edge_idx].kind = GraphPathEdgeKind.EXTERIOR
            if selected_right:
                self._reverse_edge(edge_idx)

        self._remove_duplicate_exterior_edges(accuracy)

    def _reverse_edge(self, edge_idx: int) -> None:
        edge = self.edges[edge_idx]
        self.points[edge.start_idx].forward_edges.remove(edge_idx)
        self.edges[edge_idx] = replace(edge, start_idx=edge.end_idx, cp1=edge.cp2, cp2=edge.cp1, end_idx=edge.start_idx)
        self.points[edge.end_idx].forward_edges.append(edge_idx)

    def _remove_duplicate_exterior_edges(self, accuracy: float) -> None:
        tolerance = max(CLOSE_DISTANCE, accuracy)
        kept: Dict[Tuple[int, int], List[Coord2]] = {}
        for edge_idx, edge in enumerate(self.edges):
            if edge.kind != GraphPathEdgeKind.EXTERIOR:
                continue
            middle = self.edge_curve(edge_idx).point_at_pos(0.5)
            others = kept.setdefault((edge.start_idx, edge.end_idx), [])
            if any(middle.is_near_to(other, tolerance) for other in others):
                edge.kind = GraphPathEdgeKind.INTERIOR
            else:
                others.append(middle)

    def exterior_edges(self) -> List[int]:
        return [idx for idx, edge in enumerate(self.edges) if edge.kind == GraphPathEdgeKind.EXTERIOR]

    ###########################################################################
    # Walk
    ###########################################################################

    def exterior_paths(self) -> List[SimpleBezierPath]:
        """
        Join the exterior edges into closed paths.

        At a node with several ways out, the path turns as far left as
        possible, which keeps shapes touching in a single point apart.
        """
        visited = set()
        paths: List[SimpleBezierPath] = []

        for first_idx in self.exterior_edges():
            if first_idx in visited:
                continue

            loop = [first_idx]
            visited.add(first_idx)
            start_node = self.edges[first_idx].start_idx
            current = first_idx

            while self.edges[current].end_idx != start_node:
                next_idx = self._leftmost_exit(current, visited)
                if next_idx is None:
                    break
                loop.append(next_idx)
                visited.add(next_idx)
                current = next_idx

            if self.edges[current].end_idx != start_node:
                logger.debug("Dropping %d exterior edges that do not form a loop", len(loop))
                continue

            start = self.points[start_node].position
            segments = tuple(
                (self.edges[idx].cp1, self.edges[idx].cp2, self.points[self.edges[idx].end_idx].position)
                for idx in loop
            )
            paths.append(SimpleBezierPath(start, segments))

        logger.debug("Walked %d exterior paths", len(paths))
        return paths

    def _leftmost_exit(self, edge_idx: int, visited: set) -> Optional[int]:
        incoming = _end_direction(self.edge_curve(edge_idx))
        node_idx = self.edges[edge_idx].end_idx

        best_idx = None
        best_angle = -math.inf
        for candidate in self.points[node_idx].forward_edges:
            if candidate in visited or self.edges[candidate].kind != GraphPathEdgeKind.EXTERIOR:
                continue
            outgoing = _start_direction(self.edge_curve(candidate))
            angle = math.atan2(incoming.cross(outgoing), incoming.dot(outgoing))
            if angle > best_angle:
                best_angle = angle
                best_idx = candidate
        return best_idx


def _start_direction(curve: Curve) -> Coord2:
    for point in (curve.cp1, curve.cp2, curve.end):
        if not point.is_near_to(curve.start, 1.0e-9):
            return (point - curve.start).to_unit_vector()
    return Coord2(0.0, 0.0)


def _end_direction(curve: Curve) -> Coord2:
    for point in (curve.cp2, curve.cp1, curve.start):
        if not point.is_near_to(curve.end, 1.0e-9):
            return (curve.end - point).to_unit_vector()
    return Coord2(0.0, 0.0)


def graph_from_operands(
    path1: Sequence, path2: Sequence, accuracy: float = DEFAULT_ACCURACY
) -> GraphPath:
    """Collided graph of two shapes (each a path or a list of sub-paths)."""
    graph1 = GraphPath.from_paths(path1, PathSource.PATH1)
    graph2 = GraphPath.from_paths(path2, PathSource.PATH2)
    return graph1.collide(graph2, accuracy)
