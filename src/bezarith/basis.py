"""
Evaluation of cubic Bezier curves on one axis (or on points).

All functions take the weights (control values) of a Bezier curve and work on
anything supporting +, - and multiplication by a float, so both plain floats
and Coord2 values can be used as weights.
"""

from __future__ import annotations

import math
from typing import List, Tuple, TypeVar

W = TypeVar("W")


def basis(t: float, w1: W, w2: W, w3: W, w4: W) -> W:
    """
    Evaluate the cubic Bernstein polynomial with weights w1..w4 at t.

    t is not clamped: values outside [0, 1] extrapolate the curve.
    """
    t_squared = t * t
    t_cubed = t_squared * t

    one_minus_t = 1.0 - t
    one_minus_t_squared = one_minus_t * one_minus_t
    one_minus_t_cubed = one_minus_t_squared * one_minus_t

    return (
        w1 * one_minus_t_cubed
        + w2 * (3.0 * one_minus_t_squared * t)
        + w3 * (3.0 * one_minus_t * t_squared)
        + w4 * t_cubed
    )


def de_casteljau2(t: float, w1: W, w2: W) -> W:
    """Linear interpolation between two weights."""
    return w1 * (1.0 - t) + w2 * t


def de_casteljau3(t: float, w1: W, w2: W, w3: W) -> W:
    """Quadratic Bezier evaluation by repeated interpolation."""
    wn1 = de_casteljau2(t, w1, w2)
    wn2 = de_casteljau2(t, w2, w3)
    return de_casteljau2(t, wn1, wn2)


def de_casteljau4(t: float, w1: W, w2: W, w3: W, w4: W) -> W:
    """Cubic Bezier evaluation by repeated interpolation. Agrees with basis()."""
    wn1 = de_casteljau2(t, w1, w2)
    wn2 = de_casteljau2(t, w2, w3)
    wn3 = de_casteljau2(t, w3, w4)
    return de_casteljau3(t, wn1, wn2, wn3)


def subdivide4(t: float, w1: W, w2: W, w3: W, w4: W) -> Tuple[Tuple[W, W, W, W], Tuple[W, W, W, W]]:
    """
    Split a cubic curve at t.

    Returns the weights of the curve covering [0, t] and the curve covering [t, 1].
    Evaluating the first at s gives basis(t*s), the second gives basis(t + s*(1-t)).
    """
    wn1 = de_casteljau2(t, w1, w2)
    wn2 = de_casteljau2(t, w2, w3)
    wn3 = de_casteljau2(t, w3, w4)

    wnn1 = de_casteljau2(t, wn1, wn2)
    wnn2 = de_casteljau2(t, wn2, wn3)

    p = de_casteljau2(t, wnn1, wnn2)

    return ((w1, wn1, wnn1, p), (p, wnn2, wn3, w4))


def derivative4(w1: W, w2: W, w3: W, w4: W) -> Tuple[W, W, W]:
    """Weights of the (quadratic) derivative of a cubic curve."""
    return ((w2 - w1) * 3.0, (w3 - w2) * 3.0, (w4 - w3) * 3.0)


def derivative3(w1: W, w2: W, w3: W) -> Tuple[W, W]:
    """Weights of the (linear) derivative of a quadratic curve."""
    return ((w2 - w1) * 2.0, (w3 - w2) * 2.0)


def derivative2(w1: W, w2: W) -> W:
    """The (constant) derivative of a linear curve."""
    return w2 - w1


def bezier_coefficients(w1: float, w2: float, w3: float, w4: float) -> Tuple[float, float, float, float]:
    """
    Power basis coefficients (d, c, b, a) so that basis(t) = d*t^3 + c*t^2 + b*t + a.
    """
    d = -w1 + 3.0 * w2 - 3.0 * w3 + w4
    c = 3.0 * w1 - 6.0 * w2 + 3.0 * w3
    b = -3.0 * w1 + 3.0 * w2
    a = w1
    return (d, c, b, a)


def solve_quadratic(a: float, b: float, c: float) -> List[float]:
    """Real roots of a*t^2 + b*t + c (falls back to the linear case when a is 0)."""
    if a == 0.0:
        if b == 0.0:
            return []
        return [-c / b]

    discriminant = b * b - 4.0 * a * c
    if discriminant < 0.0:
        return []
    if discriminant == 0.0:
        return [-b / (2.0 * a)]

    root = math.sqrt(discriminant)
    return [(-b + root) / (2.0 * a), (-b - root) / (2.0 * a)]


def find_extremities(w1: float, w2: float, w3: float, w4: float) -> List[float]:
    """t values in [0, 1] where the derivative of the curve on this axis is 0."""
    d1, d2, d3 = derivative4(w1, w2, w3, w4)

    # Derivative in power basis: a*t^2 + b*t + c
    a = d1 - 2.0 * d2 + d3
    b = 2.0 * (d2 - d1)
    c = d1

    return [t for t in solve_quadratic(a, b, c) if 0.0 < t < 1.0]


def bounding_box4(w1: float, w2: float, w3: float, w4: float) -> Tuple[float, float]:
    """
    Exact (min, max) of the curve on this axis over t in [0, 1].

    Uses the extremities of the curve, so the result can be tighter than the
    range of the control values.
    """
    values = [w1, w4]
    values.extend(basis(t, w1, w2, w3, w4) for t in find_extremities(w1, w2, w3, w4))
    return (min(values), max(values))
