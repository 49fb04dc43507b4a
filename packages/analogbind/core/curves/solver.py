"""Spacing constraint solver for dragged control points.

A moved point is corrected in two phases: a local clamp against its nearest
movable neighbors, then a global spacing check over every point. When the
global check fails, the x coordinate is bisected between the last valid
position and the clamped target.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from analogbind.core.curves.models import DRAG_MIN_SPACING, SPACING_EPSILON, CurvePoint
from analogbind.core.utils.math import clamp

logger = logging.getLogger(__name__)


def sort_points(points: Sequence[CurvePoint]) -> list[CurvePoint]:
    """Return points sorted by x (stable)."""
    return sorted(points, key=lambda p: p.x)


class SpacingSolver:
    """Keeps control points at least ``min_spacing`` apart in x.

    Y is unconstrained: points may cross vertically but never collide
    horizontally. Movable points stay within [min_spacing, 1 - min_spacing].

    Args:
        min_spacing: Minimum x distance between any two points.
        max_iterations: Bisection iteration cap.
        tolerance: Bisection stops once the bracket is narrower than this.
    """

    def __init__(
        self,
        min_spacing: float = DRAG_MIN_SPACING,
        max_iterations: int = 20,
        tolerance: float = 1e-6,
    ) -> None:
        self.min_spacing = min_spacing
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    @property
    def lower_limit(self) -> float:
        return self.min_spacing

    @property
    def upper_limit(self) -> float:
        return 1.0 - self.min_spacing

    def neighbor_bounds(
        self, points: Sequence[CurvePoint], index: int, target_x: float
    ) -> tuple[float, float]:
        """Tightest [min_x, max_x] window around target_x.

        Only movable neighbors narrow the window; the anchors are covered by
        the [min_spacing, 1 - min_spacing] limits. min_x may exceed max_x when
        neighbors are packed tighter than the spacing allows.
        """
        left: float | None = None
        right: float | None = None

        for i, other in enumerate(points):
            if i == index or other.is_fixed:
                continue
            if other.x <= target_x + SPACING_EPSILON and (left is None or other.x > left):
                left = other.x
            if other.x >= target_x - SPACING_EPSILON and (right is None or other.x < right):
                right = other.x

        min_x = self.lower_limit
        max_x = self.upper_limit
        if left is not None:
            min_x = max(min_x, left + self.min_spacing)
        if right is not None:
            max_x = min(max_x, right - self.min_spacing)
        return min_x, max_x

    def clamp_x(self, points: Sequence[CurvePoint], index: int, target_x: float) -> float:
        """Clamp target_x into its neighbor window (local phase)."""
        min_x, max_x = self.neighbor_bounds(points, index, target_x)
        if min_x > max_x + SPACING_EPSILON:
            chosen = min_x if abs(target_x - min_x) <= abs(target_x - max_x) else max_x
            return clamp(chosen, 0.0, 1.0)
        return clamp(target_x, min_x, max_x)

    def spacing_ok(self, points: Sequence[CurvePoint]) -> bool:
        """Check every consecutive gap and the movable-point limits."""
        ordered = sort_points(points)
        for p1, p2 in zip(ordered, ordered[1:]):
            if p2.x - p1.x < self.min_spacing - SPACING_EPSILON:
                return False
        for p in ordered:
            if p.is_fixed:
                continue
            if p.x < self.lower_limit - SPACING_EPSILON or p.x > self.upper_limit + SPACING_EPSILON:
                return False
        return True

    def _with_x(self, points: Sequence[CurvePoint], index: int, x: float) -> list[CurvePoint]:
        candidate = list(points)
        candidate[index] = candidate[index].moved(x, candidate[index].y)
        return candidate

    def bisect(
        self, points: Sequence[CurvePoint], index: int, old_x: float, target_x: float
    ) -> float:
        """Largest feasible x found between old_x and target_x.

        Returns old_x when no probe validates.
        """
        left, right = old_x, target_x
        best = old_x

        for _ in range(self.max_iterations):
            if abs(right - left) < self.tolerance:
                break
            mid = (left + right) * 0.5
            if self.spacing_ok(self._with_x(points, index, mid)):
                best = mid
                left = mid
            else:
                right = mid

        return best

    def solve(
        self, points: Sequence[CurvePoint], index: int, target_x: float, target_y: float
    ) -> CurvePoint:
        """Corrected position for moving points[index] toward (target_x, target_y).

        Args:
            points: Current control points (any order).
            index: Index of the moving point within ``points``.
            target_x: Desired x.
            target_y: Desired y (clamped to [0, 1]).

        Returns:
            The moved point. Fixed points are returned unchanged.

        Raises:
            IndexError: If index is out of range.
        """
        current = points[index]
        if current.is_fixed:
            return current

        new_y = clamp(target_y, 0.0, 1.0)
        new_x = self.clamp_x(points, index, clamp(target_x, 0.0, 1.0))

        if not self.spacing_ok(self._with_x(points, index, new_x)):
            accepted = self.bisect(points, index, current.x, new_x)
            logger.debug(
                f"Spacing check failed at x={new_x:.6f}; bisected to x={accepted:.6f}"
            )
            new_x = accepted

        return current.moved(new_x, new_y)
