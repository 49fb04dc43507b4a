"""Editable response curve."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from analogbind.core.curves.errors import CurveCapacityError, CurvePlacementError
from analogbind.core.curves.evaluation import evaluate_curve
from analogbind.core.curves.models import (
    ADD_MIN_SPACING,
    ANCHOR_END,
    ANCHOR_START,
    DEFAULT_ANCHORS,
    MAX_MOVABLE_POINTS,
    CurvePoint,
    is_anchor_position,
)
from analogbind.core.curves.solver import SpacingSolver, sort_points
from analogbind.core.utils.math import clamp, round_to

logger = logging.getLogger(__name__)


class CurveModel:
    """Ordered control points plus the evaluation mode.

    Points are kept sorted by x. The two anchors are always present. Every
    mutation returns the authoritative result after constraint solving, so
    callers never hold a position the model did not accept.

    Args:
        points: Initial control points. Missing anchors are added.
        use_smooth: Evaluate with Hermite segments instead of straight lines.
        max_movable_points: Capacity for non-anchor points.
        add_min_spacing: Minimum x distance for a newly added point.
        solver: Spacing solver used for moves.

    Example:
        >>> curve = CurveModel()
        >>> idx = curve.add_point(0.5, 0.8)
        >>> round(curve.evaluate(0.25), 6)
        0.4
    """

    def __init__(
        self,
        points: Iterable[CurvePoint] | None = None,
        use_smooth: bool = False,
        *,
        max_movable_points: int = MAX_MOVABLE_POINTS,
        add_min_spacing: float = ADD_MIN_SPACING,
        solver: SpacingSolver | None = None,
    ) -> None:
        self.use_smooth = use_smooth
        self.max_movable_points = max_movable_points
        self.add_min_spacing = add_min_spacing
        self.solver = solver or SpacingSolver()
        self._points: list[CurvePoint] = self._with_anchors(points or DEFAULT_ANCHORS)

    @staticmethod
    def _with_anchors(points: Iterable[CurvePoint]) -> list[CurvePoint]:
        result = [p for p in points if not p.is_fixed]
        result.extend(DEFAULT_ANCHORS)
        return sort_points(result)

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[float, float]] | None,
        use_smooth: bool = False,
        **kwargs,
    ) -> CurveModel:
        """Build from stored (x, y) pairs.

        Pairs exactly at (0, 0) or (1, 1) are the anchors; everything else is
        movable. Coordinates are clamped to [0, 1].
        """
        points: list[CurvePoint] = []
        for x, y in pairs or ():
            x, y = clamp(float(x), 0.0, 1.0), clamp(float(y), 0.0, 1.0)
            if is_anchor_position(x, y):
                continue
            points.append(CurvePoint(x=x, y=y))

        model = cls(points, use_smooth, **kwargs)
        if not model.solver.spacing_ok(model.points):
            logger.warning(f"Loaded curve violates point spacing: {model.to_pairs()}")
        return model

    @property
    def points(self) -> tuple[CurvePoint, ...]:
        return tuple(self._points)

    @property
    def movable_count(self) -> int:
        return sum(1 for p in self._points if not p.is_fixed)

    @property
    def is_default(self) -> bool:
        """True when only the two anchors remain."""
        return self.movable_count == 0

    @property
    def can_add_point(self) -> bool:
        return self.movable_count < self.max_movable_points

    def to_pairs(self) -> list[tuple[float, float]]:
        return [p.as_pair() for p in self._points]

    def copy(self) -> CurveModel:
        return CurveModel(
            self._points,
            self.use_smooth,
            max_movable_points=self.max_movable_points,
            add_min_spacing=self.add_min_spacing,
            solver=self.solver,
        )

    def evaluate(self, t: float) -> float:
        """Output at input t in [0, 1]."""
        return evaluate_curve(self._points, t, self.use_smooth)

    def index_of(self, point: CurvePoint) -> int:
        """Index of a point equal to ``point``.

        Raises:
            CurvePlacementError: If no such point exists.
        """
        for i, p in enumerate(self._points):
            if p == point:
                return i
        raise CurvePlacementError(f"Point ({point.x:.3f}, {point.y:.3f}) is not on the curve")

    def find_near(self, x: float, y: float, radius: float) -> int | None:
        """Index of the first point within ``radius`` of (x, y), if any."""
        for i, p in enumerate(self._points):
            if (p.x - x) ** 2 + (p.y - y) ** 2 <= radius * radius:
                return i
        return None

    def is_valid_new_point(self, x: float) -> bool:
        """Whether x keeps the add-time spacing from every existing point."""
        return all(abs(p.x - x) >= self.add_min_spacing for p in self._points)

    def add_point(self, x: float, y: float) -> int:
        """Insert a movable point.

        Args:
            x: Input coordinate (clamped to [0, 1]).
            y: Output coordinate (clamped to [0, 1]).

        Returns:
            Index of the new point.

        Raises:
            CurveCapacityError: If the movable-point limit is reached.
            CurvePlacementError: If x is closer than add_min_spacing to any point.
        """
        if not self.can_add_point:
            raise CurveCapacityError(self.max_movable_points)

        x, y = clamp(x, 0.0, 1.0), clamp(y, 0.0, 1.0)
        if not self.is_valid_new_point(x):
            raise CurvePlacementError(
                f"Point at x={x:.3f} is closer than {self.add_min_spacing} to an existing point"
            )

        point = CurvePoint(x=x, y=y)
        self._points = sort_points([*self._points, point])
        return self._points.index(point)

    def _movable_index(self, index: int) -> CurvePoint:
        if not 0 <= index < len(self._points):
            raise CurvePlacementError(f"No point at index {index}")
        point = self._points[index]
        if point.is_fixed:
            raise CurvePlacementError("Anchor points cannot be edited")
        return point

    def remove_point(self, index: int) -> CurvePoint:
        """Remove a movable point and return it.

        Raises:
            CurvePlacementError: For anchors or an unknown index.
        """
        point = self._movable_index(index)
        del self._points[index]
        return point

    def move_point(self, index: int, x: float, y: float) -> int:
        """Move a point toward (x, y) through the spacing solver.

        Returns:
            The point's index after re-sorting.

        Raises:
            CurvePlacementError: For anchors or an unknown index.
        """
        self._movable_index(index)
        moved = self.solver.solve(self._points, index, x, y)

        updated = list(self._points)
        updated[index] = moved
        self._points = sort_points(updated)
        return next(i for i, p in enumerate(self._points) if p is moved)

    def set_point_x(self, index: int, x: float) -> int:
        """Numeric x edit: rounded to 3 decimals, clamped, then solved."""
        point = self._movable_index(index)
        return self.move_point(index, clamp(round_to(x, 3), 0.0, 1.0), point.y)

    def set_point_y(self, index: int, y: float) -> int:
        """Numeric y edit: rounded to 3 decimals and clamped."""
        point = self._movable_index(index)
        updated = list(self._points)
        updated[index] = point.moved(point.x, clamp(round_to(y, 3), 0.0, 1.0))
        self._points = updated
        return index

    def reset(self) -> None:
        """Drop every movable point and return to linear evaluation."""
        self._points = [ANCHOR_START, ANCHOR_END]
        self.use_smooth = False

    def replace_points(self, points: Sequence[CurvePoint]) -> None:
        """Replace the point set wholesale (anchors are re-added)."""
        self._points = self._with_anchors(points)

    def check_spacing(self) -> bool:
        return self.solver.spacing_ok(self._points)

    def __repr__(self) -> str:
        mode = "smooth" if self.use_smooth else "linear"
        return f"CurveModel({self.to_pairs()!r}, {mode})"
