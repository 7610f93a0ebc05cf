"""Least-squares fitting of cubic Bezier curves to sampled points (brush strokes)."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from bezarith.consts import CLOSE_DISTANCE
from bezarith.coordinate import Coord2
from bezarith.curve import Curve
from bezarith.errors import MalformedPathError
from bezarith.line import line_to_bezier

# Above this many samples chord-length parameterisation is tried as well
_CHORD_LENGTH_MIN_POINTS: int = 10
_FIT_ERROR_EPS: float = 1.0e-14


def _as_point_array(points: Union[Sequence, NDArray[np.float64]]) -> NDArray[np.float64]:
    if isinstance(points, np.ndarray) and points.dtype == np.float64:
        points_array = points
    else:
        points_array = np.asarray([tuple(p) for p in points], dtype=np.float64)
    if points_array.ndim != 2 or points_array.shape[1] < 2:
        raise MalformedPathError("Curve fitting requires (x, y) formatted points.")
    return points_array[:, :2]


def fit_curve_cubic(points: Union[Sequence, NDArray[np.float64]]) -> Curve:
    """
    Fit a single cubic curve through sampled points.

    The first and last points become the start and end of the curve; the
    two control points are found by least squares, first with uniformly
    spaced parameters and, for longer inputs, with chord-length parameters,
    keeping whichever fits better. Two or three points give a straight line.

    Raises:
        MalformedPathError: If fewer than two points are given.
    """
    xy_points = _as_point_array(points)
    num_points = xy_points.shape[0]
    if num_points < 2:
        raise MalformedPathError("At least two points are required to fit a curve.")

    start = Coord2(float(xy_points[0, 0]), float(xy_points[0, 1]))
    end = Coord2(float(xy_points[-1, 0]), float(xy_points[-1, 1]))
    if num_points < 4:
        return line_to_bezier((start, end))

    best: Optional[Tuple[float, float, float, float]] = None
    best_error = math.inf

    params_uniform = np.linspace(0.0, 1.0, num_points, dtype=np.float64)
    controls = _solve_controls(params_uniform, xy_points)
    if controls is not None:
        best = controls
        best_error = _evaluate_error(params_uniform, xy_points, controls)

    if num_points > _CHORD_LENGTH_MIN_POINTS and best_error > _FIT_ERROR_EPS:
        params_chord = chord_length_parameters(xy_points)
        if params_chord is not None:
            controls = _solve_controls(params_chord, xy_points)
            if controls is not None:
                error = _evaluate_error(params_chord, xy_points, controls)
                if error < best_error:
                    best, best_error = controls, error

    if best is None:
        # Degenerate samples (all parameters alike): fall back to the chord
        return line_to_bezier((start, end))

    ctrl1_x, ctrl1_y, ctrl2_x, ctrl2_y = best
    return Curve(start, Coord2(ctrl1_x, ctrl1_y), Coord2(ctrl2_x, ctrl2_y), end)


def chord_length_parameters(xy_points: NDArray[np.float64]) -> Optional[NDArray[np.float64]]:
    """Parameters proportional to the distance travelled along the samples."""
    deltas = np.diff(xy_points, axis=0)
    diffs = np.hypot(deltas[:, 0], deltas[:, 1])
    total_length = float(np.sum(diffs))
    if total_length <= 0.0 or not math.isfinite(total_length):
        return None
    cumulative = np.empty(xy_points.shape[0], dtype=np.float64)
    cumulative[0] = 0.0
    cumulative[1:] = np.cumsum(diffs) / total_length
    return cumulative


def _solve_controls(
    params: NDArray[np.float64], xy_points: NDArray[np.float64]
) -> Optional[Tuple[float, float, float, float]]:
    """Least-squares control points for fixed end points and parameters."""
    t_values = params[1:-1]
    if len(t_values) < 2:
        return None

    omt = 1.0 - t_values
    omt2 = omt * omt
    t2 = t_values * t_values

    w1 = 3.0 * omt2 * t_values
    w2 = 3.0 * omt * t2

    s11 = float(np.dot(w1, w1))
    s12 = float(np.dot(w1, w2))
    s22 = float(np.dot(w2, w2))

    det = s11 * s22 - s12 * s12
    if det <= 0.0 or not math.isfinite(det):
        return None

    start = xy_points[0]
    end = xy_points[-1]
    base = np.outer(omt2 * omt, start) + np.outer(t2 * t_values, end)
    residual = xy_points[1:-1] - base

    r1 = w1 @ residual
    r2 = w2 @ residual

    inv_det = 1.0 / det
    ctrl1 = (r1 * s22 - r2 * s12) * inv_det
    ctrl2 = (r2 * s11 - r1 * s12) * inv_det

    if not (np.all(np.isfinite(ctrl1)) and np.all(np.isfinite(ctrl2))):
        return None
    return (float(ctrl1[0]), float(ctrl1[1]), float(ctrl2[0]), float(ctrl2[1]))


def _curve_points(params: NDArray[np.float64], xy_points: NDArray[np.float64], controls) -> NDArray[np.float64]:
    ctrl1 = np.array(controls[:2], dtype=np.float64)
    ctrl2 = np.array(controls[2:], dtype=np.float64)
    omt = 1.0 - params
    t2 = params * params
    omt2 = omt * omt
    return (
        np.outer(omt2 * omt, xy_points[0])
        + np.outer(3.0 * omt2 * params, ctrl1)
        + np.outer(3.0 * omt * t2, ctrl2)
        + np.outer(t2 * params, xy_points[-1])
    )


def _evaluate_error(params: NDArray[np.float64], xy_points: NDArray[np.float64], controls) -> float:
    """Sum of squared distances between samples and the curve at their parameters."""
    residual = xy_points - _curve_points(params, xy_points, controls)
    return float(np.sum(residual * residual))


def fit_curve(points: Union[Sequence, NDArray[np.float64]], max_error: float = CLOSE_DISTANCE) -> List[Curve]:
    """
    Fit a sequence of cubic curves through sampled points.

    A single curve is fitted first; while some sample is further than
    max_error from its fitted position, the samples are split at the worst
    point and both halves are fitted separately. Consecutive curves share
    their end points.
    """
    xy_points = _as_point_array(points)
    if xy_points.shape[0] < 2:
        raise MalformedPathError("At least two points are required to fit a curve.")
    return _fit_recursive(xy_points, max_error)


def _fit_recursive(xy_points: NDArray[np.float64], max_error: float) -> List[Curve]:
    curve = fit_curve_cubic(xy_points)
    num_points = xy_points.shape[0]
    if num_points < 4:
        return [curve]

    controls = (curve.cp1.x, curve.cp1.y, curve.cp2.x, curve.cp2.y)
    distances = None
    for params in (np.linspace(0.0, 1.0, num_points, dtype=np.float64), chord_length_parameters(xy_points)):
        if params is None:
            continue
        fitted = _curve_points(params, xy_points, controls)
        candidate = np.hypot(fitted[:, 0] - xy_points[:, 0], fitted[:, 1] - xy_points[:, 1])
        if distances is None or candidate.max() < distances.max():
            distances = candidate

    # The end points are fixed, so the worst sample is always an interior one
    worst = int(np.argmax(distances))
    if distances[worst] <= max_error or worst in (0, num_points - 1):
        return [curve]

    return _fit_recursive(xy_points[: worst + 1], max_error) + _fit_recursive(xy_points[worst:], max_error)
