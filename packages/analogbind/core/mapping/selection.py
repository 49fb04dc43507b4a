"""Multi-record selection with mixed-value tracking."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict

from analogbind.core.curves.curve_model import CurveModel
from analogbind.core.curves.deadzone import DeadZoneRange
from analogbind.core.curves.models import ResponseCurve
from analogbind.core.curves.solver import SpacingSolver
from analogbind.core.mapping.models import MappingRecord

logger = logging.getLogger(__name__)

MIXED_EPSILON = 0.001


class SelectionStatus(str, Enum):
    """Outcome of loading a selection into the editor."""

    EMPTY = "empty"
    DIGITAL = "digital"
    INVALID = "invalid"
    CONFLICTED = "conflicted"
    SINGLE = "single"
    MULTIPLE = "multiple"

    @property
    def editable(self) -> bool:
        return self in (SelectionStatus.SINGLE, SelectionStatus.MULTIPLE)


class MixedFlags(BaseModel):
    """Per-field "values differ across the selection" flags."""

    model_config = ConfigDict(extra="forbid")

    inner: bool = False
    outer: bool = False
    smooth: bool = False
    curve: bool = False

    @property
    def any(self) -> bool:
        return self.inner or self.outer or self.smooth or self.curve


def points_equal(
    a: Sequence[tuple[float, float]] | None,
    b: Sequence[tuple[float, float]] | None,
    epsilon: float = MIXED_EPSILON,
) -> bool:
    """Point lists match in length and every coordinate within epsilon."""
    if a is None and b is None:
        return True
    if a is None or b is None or len(a) != len(b):
        return False
    return all(
        abs(p[0] - q[0]) <= epsilon and abs(p[1] - q[1]) <= epsilon for p, q in zip(a, b)
    )


def mixed_flags(records: Sequence[MappingRecord], epsilon: float = MIXED_EPSILON) -> MixedFlags:
    """Compare every record against the first one.

    Dead zone bounds differ beyond ``epsilon``; the smooth flag differs at
    all; the curve differs in type or, for custom curves, in its points.
    """
    if len(records) <= 1:
        return MixedFlags()

    first = records[0]
    rest = records[1:]
    curve_mixed = any(r.curve_type != first.curve_type for r in rest)
    if not curve_mixed and first.curve_type == ResponseCurve.CUSTOM:
        curve_mixed = any(
            not points_equal(first.custom_points, r.custom_points, epsilon) for r in rest
        )

    return MixedFlags(
        inner=any(abs(r.dead_zone_inner - first.dead_zone_inner) > epsilon for r in rest),
        outer=any(abs(r.dead_zone_outer - first.dead_zone_outer) > epsilon for r in rest),
        smooth=any(r.use_smooth_curve != first.use_smooth_curve for r in rest),
        curve=curve_mixed,
    )


class MultiSelectAggregator:
    """Edits one or more analog records as a unit.

    The aggregator holds the values shown by the editor. Fields that differ
    across the selection are flagged mixed and shown without a value; writing
    a field clears its flag, and apply() copies only non-mixed fields to every
    selected record.

    Args:
        epsilon: Tolerance for dead zone and point comparisons.
        min_separation: Dead zone separation in percent.
        max_movable_points: Curve capacity for non-anchor points.
        add_min_spacing: Minimum x distance for an added point.
        drag_min_spacing: Minimum x distance kept while dragging.

    Example:
        >>> agg = MultiSelectAggregator()
        >>> agg.load([a, b])
        <SelectionStatus.MULTIPLE: 'multiple'>
        >>> agg.set_inner(7)
        >>> agg.apply()
    """

    def __init__(
        self,
        epsilon: float = MIXED_EPSILON,
        min_separation: float = 5.0,
        max_movable_points: int = 12,
        add_min_spacing: float = 0.02,
        drag_min_spacing: float = 0.01,
    ) -> None:
        self.epsilon = epsilon
        self.min_separation = min_separation
        self._curve_kwargs = {
            "max_movable_points": max_movable_points,
            "add_min_spacing": add_min_spacing,
            "solver": SpacingSolver(min_spacing=drag_min_spacing),
        }

        self.records: list[MappingRecord] = []
        self.status = SelectionStatus.EMPTY
        self.ignored_digital = 0
        self.mixed = MixedFlags()
        self.dead_zone = DeadZoneRange(min_separation=min_separation)
        self.curve = self._default_curve()

    def _default_curve(self) -> CurveModel:
        return CurveModel(**self._curve_kwargs)

    @property
    def use_smooth(self) -> bool:
        return self.curve.use_smooth

    @property
    def editable(self) -> bool:
        return self.status.editable

    def _reset_defaults(self) -> None:
        self.records = []
        self.mixed = MixedFlags()
        self.dead_zone = DeadZoneRange(min_separation=self.min_separation)
        self.curve = self._default_curve()

    def load(self, records: Sequence[MappingRecord]) -> SelectionStatus:
        """Load a selection.

        Digital records are ignored. Any incomplete or conflicted analog
        record disables editing; otherwise one record loads directly and
        several load with mixed-value detection.
        """
        self._reset_defaults()
        analog = [r for r in records if r.is_analog]
        self.ignored_digital = len(records) - len(analog)
        if self.ignored_digital:
            logger.debug(f"Ignoring {self.ignored_digital} digital mapping(s)")

        if not records:
            self.status = SelectionStatus.EMPTY
        elif not analog:
            self.status = SelectionStatus.DIGITAL
        elif any(not r.is_valid for r in analog):
            self.status = SelectionStatus.INVALID
        elif any(r.has_warning for r in analog):
            self.status = SelectionStatus.CONFLICTED
        else:
            self.records = analog
            self.status = SelectionStatus.SINGLE if len(analog) == 1 else SelectionStatus.MULTIPLE
            self._load_values(analog)

        return self.status

    def _load_values(self, records: list[MappingRecord]) -> None:
        first = records[0]
        self.mixed = mixed_flags(records, self.epsilon)

        # Mixed bounds show as 0 / 100 and are never written back
        inner = 0 if self.mixed.inner else round(first.dead_zone_inner * 100)
        outer = 100 if self.mixed.outer else round(first.dead_zone_outer * 100)
        self.dead_zone = DeadZoneRange.from_fractions(
            inner / 100, outer / 100, self.min_separation
        )

        if self.mixed.curve:
            self.curve = self._default_curve()
        else:
            self.curve = first.curve_model(**self._curve_kwargs)
        self.curve.use_smooth = False if self.mixed.smooth else first.use_smooth_curve

    def set_inner(self, value: float) -> None:
        """Write the inner bound (percent) for the whole selection."""
        self.mixed.inner = False
        before = self.dead_zone.outer
        self.dead_zone.set_inner(value)
        if self.dead_zone.outer != before:
            self.mixed.outer = False

    def set_outer(self, value: float) -> None:
        """Write the outer bound (percent) for the whole selection."""
        self.mixed.outer = False
        before = self.dead_zone.inner
        self.dead_zone.set_outer(value)
        if self.dead_zone.inner != before:
            self.mixed.inner = False

    def set_dead_zone(self, lower: float, upper: float) -> None:
        """Two-handle update: only handles that actually moved are written."""
        lower = round(min(max(lower, 0.0), 100.0))
        upper = round(min(max(upper, 0.0), 100.0))
        if abs(upper - self.dead_zone.outer) >= 1:
            self.set_outer(upper)
        if abs(lower - self.dead_zone.inner) >= 1:
            self.set_inner(lower)

    def set_smooth(self, value: bool) -> None:
        self.mixed.smooth = False
        self.curve.use_smooth = value

    def exit_curve_mixed(self) -> bool:
        """Drop the mixed curve placeholder for a fresh default curve.

        Returns True if the curve was mixed.
        """
        if not self.mixed.curve:
            return False
        smooth = self.curve.use_smooth
        self.curve = self._default_curve()
        self.curve.use_smooth = smooth
        self.mixed.curve = False
        return True

    def reset_curve(self) -> None:
        """Default curve, linear evaluation, for the whole selection."""
        self.curve = self._default_curve()
        self.mixed.curve = False
        self.mixed.smooth = False

    def _commit_dead_zone(self, record: MappingRecord) -> None:
        if self.mixed.inner and self.mixed.outer:
            return
        dz = record.dead_zone_range(self.min_separation)
        before = (dz.inner, dz.outer)
        if not self.mixed.outer:
            dz.set_outer(self.dead_zone.outer)
        if not self.mixed.inner:
            dz.set_inner(self.dead_zone.inner)
        if dz.inner != before[0]:
            record.dead_zone_inner = dz.inner_fraction
        if dz.outer != before[1]:
            record.dead_zone_outer = dz.outer_fraction

    def apply(self) -> list[MappingRecord]:
        """Write every non-mixed field to every selected record.

        Returns:
            The records written to (the whole editable selection).
        """
        if not self.editable:
            return []

        for record in self.records:
            self._commit_dead_zone(record)
            if not self.mixed.smooth:
                record.use_smooth_curve = self.curve.use_smooth
            if self.mixed.curve:
                continue
            record.apply_curve(self.curve)

        return list(self.records)
