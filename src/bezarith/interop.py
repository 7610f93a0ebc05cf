"""Conversion between Bezier paths and shapely geometries (polygonized)."""

from __future__ import annotations

from typing import List

import numpy as np
import shapely.geometry
import shapely.geometry.polygon
from numpy.typing import NDArray

from bezarith.errors import MalformedPathError
from bezarith.path import SimpleBezierPath, as_path_list, closed_curves, path_from_points

# Number of line segments per curve when polygonizing
DEFAULT_STEPS: int = 32


def path_to_points(path, steps: int = DEFAULT_STEPS) -> NDArray[np.float64]:
    """
    Polygonized outline of a closed path as (n, 2) array.

    The first point is not repeated at the end.
    """
    curves = closed_curves(as_path_list(path)[0])
    if not curves:
        return np.empty((0, 2), dtype=np.float64)
    # Skip the first point of every curve, it equals the last point of the previous one
    points = np.concatenate([curve.polygonize(steps)[1:] for curve in curves])
    return np.roll(points, 1, axis=0)


def path_to_polygon(path, steps: int = DEFAULT_STEPS) -> shapely.geometry.Polygon:
    """Polygon of a single closed path, with self-intersections resolved by buffer(0)."""
    points = path_to_points(path, steps)
    if len(points) < 3:
        return shapely.geometry.Polygon()
    polygon = shapely.geometry.Polygon(points)
    if not polygon.is_valid:
        polygon = polygon.buffer(0)
    return polygon


def paths_to_shapely(paths, steps: int = DEFAULT_STEPS) -> shapely.geometry.base.BaseGeometry:
    """
    Geometry of a shape made of several sub-paths, combined with the even-odd rule.

    An outline with another path inside it therefore becomes a polygon with a hole.
    """
    result = shapely.geometry.Polygon()
    for path in as_path_list(paths):
        polygon = path_to_polygon(path, steps)
        if polygon.is_empty:
            continue
        result = result.symmetric_difference(polygon)
    return result


def shapely_to_paths(geometry: shapely.geometry.base.BaseGeometry) -> List[SimpleBezierPath]:
    """
    Straight-edged paths for every ring of a Polygon or MultiPolygon.

    Exterior rings run anticlockwise, holes clockwise.
    """
    if geometry.is_empty:
        return []
    if isinstance(geometry, shapely.geometry.Polygon):
        polygons = [geometry]
    elif isinstance(geometry, shapely.geometry.MultiPolygon):
        polygons = list(geometry.geoms)
    elif isinstance(geometry, shapely.geometry.GeometryCollection):
        polygons = [geom for geom in geometry.geoms if isinstance(geom, shapely.geometry.Polygon)]
    else:
        raise MalformedPathError(f"Only polygonal geometries can be converted, got {geometry.geom_type}")

    paths = []
    for polygon in polygons:
        oriented = shapely.geometry.polygon.orient(polygon, sign=1.0)
        for ring in [oriented.exterior, *oriented.interiors]:
            # Rings repeat their first point at the end
            coords = list(ring.coords)[:-1]
            if len(coords) >= 3:
                paths.append(path_from_points(coords))
    return paths
