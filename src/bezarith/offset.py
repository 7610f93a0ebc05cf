"""Offset curves: a curve moved along its normal by a (linearly varying) distance."""

from __future__ import annotations

from typing import List

import numpy as np

from bezarith.basis import find_extremities
from bezarith.curve import BezierCurve, Curve, curve_length
from bezarith.fit import fit_curve_cubic


def offset(curve: BezierCurve, initial_distance: float, final_distance: float, samples: int = 16) -> List[Curve]:
    """
    Offset a curve to its left (along normal_at_pos) by a distance changing
    linearly with the length travelled from initial_distance to final_distance.

    The curve is split at its extremities first so that every piece bends
    in one direction only; each piece is sampled and refitted with a single
    cubic curve. Negative distances offset to the right.
    """
    curve = Curve.from_curve(curve)
    split_points = sorted(
        set(find_extremities(curve.start.x, curve.cp1.x, curve.cp2.x, curve.end.x))
        | set(find_extremities(curve.start.y, curve.cp1.y, curve.cp2.y, curve.end.y))
    )
    split_points = [t for t in split_points if 1.0e-3 < t < 1.0 - 1.0e-3]

    total_length = curve_length(curve)
    boundaries = [0.0] + split_points + [1.0]

    def distance_at(length: float) -> float:
        if total_length == 0.0:
            return initial_distance
        return initial_distance + (final_distance - initial_distance) * (length / total_length)

    result = []
    travelled = 0.0
    for t_start, t_end in zip(boundaries, boundaries[1:]):
        piece = curve.section(t_start, t_end)
        piece_length = curve_length(piece)
        result.append(simple_offset(piece, distance_at(travelled), distance_at(travelled + piece_length), samples))
        travelled += piece_length

    return result


def simple_offset(curve: BezierCurve, initial_distance: float, final_distance: float, samples: int = 16) -> Curve:
    """Offset a curve with a single curve (works best for curves without extremities)."""
    curve = Curve.from_curve(curve)
    points = []
    for t in np.linspace(0.0, 1.0, max(samples, 4)):
        t = float(t)
        distance = initial_distance + (final_distance - initial_distance) * t
        points.append(curve.point_at_pos(t) + curve.unit_normal_at_pos(t) * distance)
    return fit_curve_cubic(points)
