"""Response curve evaluation.

Two evaluators share one contract: given control points sorted by x and an
input t, return the output in [0, 1]. Inputs past the first or last point
take that point's y.

- interpolate_linear: piecewise-linear between bracketing points
- interpolate_smooth: cubic Hermite with averaged-secant tangents
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from analogbind.core.curves.models import CurvePoint
from analogbind.core.utils.math import clamp

# Segments narrower than this are treated as zero-width
_DEGENERATE_DX = 1e-10


def hermite_basis(t: float) -> tuple[float, float, float, float]:
    """Cubic Hermite basis functions (h00, h10, h01, h11) at t in [0, 1]."""
    t2 = t * t
    t3 = t2 * t
    h00 = 2 * t3 - 3 * t2 + 1
    h10 = t3 - 2 * t2 + t
    h01 = -2 * t3 + 3 * t2
    h11 = t3 - t2
    return h00, h10, h01, h11


def _check_input(points: Sequence[CurvePoint]) -> None:
    if not points:
        raise ValueError("points cannot be empty")


def interpolate_linear(points: Sequence[CurvePoint], t: float) -> float:
    """Linearly interpolate the curve at input t.

    If t lies before the first point, returns the first point's y.
    If t lies after the last point, returns the last point's y.
    A zero-width segment returns the midpoint of its two y values.

    Args:
        points: Control points sorted by x.
        t: Input value. Values past either end point take that point's y.

    Returns:
        Output value at t.

    Raises:
        ValueError: If points is empty.

    Example:
        >>> pts = [CurvePoint(x=0, y=0), CurvePoint(x=0.5, y=0.8), CurvePoint(x=1, y=1)]
        >>> round(interpolate_linear(pts, 0.25), 6)
        0.4
    """
    _check_input(points)

    if t <= points[0].x:
        return points[0].y
    if t >= points[-1].x:
        return points[-1].y

    for i in range(len(points) - 1):
        p1, p2 = points[i], points[i + 1]
        if p1.x <= t <= p2.x:
            dx = p2.x - p1.x
            if abs(dx) < _DEGENERATE_DX:
                return (p1.y + p2.y) * 0.5
            return p1.y + (t - p1.x) / dx * (p2.y - p1.y)

    return points[-1].y


def _segment_tangents(points: Sequence[CurvePoint], i: int) -> tuple[float, float]:
    """Tangents at both ends of segment i (averaged secants, one-sided at the ends)."""
    p1, p2 = points[i], points[i + 1]
    secant = (p2.y - p1.y) / (p2.x - p1.x)

    if i == 0:
        m1 = secant
    else:
        p0 = points[i - 1]
        dx0 = max(p1.x - p0.x, _DEGENERATE_DX)
        m1 = 0.5 * (secant + (p1.y - p0.y) / dx0)

    if i == len(points) - 2:
        m2 = secant
    else:
        p3 = points[i + 2]
        dx2 = max(p3.x - p2.x, _DEGENERATE_DX)
        m2 = 0.5 * (secant + (p3.y - p2.y) / dx2)

    return m1, m2


def interpolate_smooth(points: Sequence[CurvePoint], t: float) -> float:
    """Evaluate the curve at t with cubic Hermite segments.

    Interior tangents average the two adjacent secant slopes; the first and
    last segments use their own secant at the outer end. The result is
    clamped to [0, 1] since steep neighbors can overshoot.

    Args:
        points: Control points sorted by x.
        t: Input value. Values past either end point take that point's y.

    Returns:
        Output value at t, clamped to [0, 1].

    Raises:
        ValueError: If points is empty.
    """
    _check_input(points)

    if t <= points[0].x:
        return points[0].y
    if t >= points[-1].x:
        return points[-1].y

    for i in range(len(points) - 1):
        p1, p2 = points[i], points[i + 1]
        if p1.x <= t <= p2.x:
            dx = p2.x - p1.x
            if abs(dx) < _DEGENERATE_DX:
                return (p1.y + p2.y) * 0.5

            m1, m2 = _segment_tangents(points, i)
            h00, h10, h01, h11 = hermite_basis((t - p1.x) / dx)
            y = h00 * p1.y + h10 * dx * m1 + h01 * p2.y + h11 * dx * m2
            return clamp(y, 0.0, 1.0)

    return points[-1].y


def evaluate_curve(points: Sequence[CurvePoint], t: float, use_smooth: bool = False) -> float:
    """Evaluate with the selected algorithm."""
    if use_smooth:
        return interpolate_smooth(points, t)
    return interpolate_linear(points, t)


def build_lut(points: Sequence[CurvePoint], use_smooth: bool, size: int = 256) -> np.ndarray:
    """Sample the curve on a uniform grid of ``size`` inputs covering [0, 1].

    Args:
        points: Control points sorted by x.
        use_smooth: Use Hermite interpolation instead of linear.
        size: Number of table entries. Must be >= 2.

    Returns:
        Float array of length ``size``; entry i is the output at i / (size - 1).

    Raises:
        ValueError: If size < 2 or points is empty.
    """
    if size < 2:
        raise ValueError("size must be >= 2")
    grid = np.linspace(0.0, 1.0, size)
    return np.array([evaluate_curve(points, float(x), use_smooth) for x in grid], dtype=float)


def lut_lookup(table: np.ndarray, x: float | np.ndarray) -> float | np.ndarray:
    """Look up inputs in a table built by build_lut, interpolating between entries.

    Inputs outside [0, 1] are clamped.
    """
    grid = np.linspace(0.0, 1.0, len(table))
    result = np.interp(np.clip(x, 0.0, 1.0), grid, table)
    if np.ndim(result) == 0:
        return float(result)
    return result
