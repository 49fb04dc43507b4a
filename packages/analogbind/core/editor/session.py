"""Editing surface entry points for the curve and dead-zone editor.

The session turns pointer and field events into aggregator edits, rejects
invalid curve edits with a notice, and hands committed edits to the sync
coordinator for a debounced push. Every entry point returns the
authoritative post-constraint EditorState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict

from analogbind.core.config.models import EditorConfig
from analogbind.core.curves.errors import (
    CurveCapacityError,
    CurvePlacementError,
    CurveValidationError,
)
from analogbind.core.editor.throttle import DragThrottle
from analogbind.core.mapping.models import MappingRecord
from analogbind.core.mapping.selection import MixedFlags, MultiSelectAggregator, SelectionStatus
from analogbind.core.notifications.models import Notice
from analogbind.core.notifications.notifiers import Notifier, NullNotifier
from analogbind.core.sync.coordinator import SyncCoordinator

logger = logging.getLogger(__name__)

DEFAULT_HIT_RADIUS = 0.03


class EditorField(str, Enum):
    """Numeric and toggle fields of the editor panel."""

    INNER = "inner"
    OUTER = "outer"
    SMOOTH = "smooth"
    POINT_X = "point_x"
    POINT_Y = "point_y"


class EditorState(BaseModel):
    """Snapshot of what the editor shows.

    Mixed fields carry None.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: SelectionStatus
    enabled: bool
    mixed: MixedFlags
    inner: float | None = None
    outer: float | None = None
    use_smooth: bool | None = None
    points: list[tuple[float, float]]
    selected_index: int | None = None
    movable_count: int = 0


_DISABLED_NOTICES = {
    SelectionStatus.DIGITAL: Notice.info(
        "Digital Mapping", "Curves apply to stick and trigger outputs only"
    ),
    SelectionStatus.INVALID: Notice.warning(
        "Incomplete Mapping", "Set a source key and output control before editing the curve"
    ),
    SelectionStatus.CONFLICTED: Notice.warning(
        "Duplicate Key", "Resolve duplicate keys before editing the curve"
    ),
}


class CurveEditorSession:
    """Curve and dead-zone editor bound to one selection.

    Args:
        coordinator: Receives committed edits for a debounced push. Without
            one, edits only change the selected records.
        notifier: Sink for rejection and disabled-editor notices (defaults to
            the coordinator's notifier).
        config: Editing limits.
        hit_radius: Distance within which a press selects an existing point.
        clock: Monotonic time source for the drag throttle.

    Example:
        >>> session = CurveEditorSession(coordinator)
        >>> session.load_selection([record])
        >>> session.on_pointer_press(0.5, 0.8).points
        [(0.0, 0.0), (0.5, 0.8), (1.0, 1.0)]
    """

    def __init__(
        self,
        coordinator: SyncCoordinator | None = None,
        notifier: Notifier | None = None,
        config: EditorConfig | None = None,
        hit_radius: float = DEFAULT_HIT_RADIUS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.coordinator = coordinator
        if notifier is None:
            notifier = coordinator.notifier if coordinator is not None else NullNotifier()
        self.notifier = notifier
        self.hit_radius = hit_radius

        self.aggregator = MultiSelectAggregator(
            epsilon=self.config.mixed_epsilon,
            min_separation=self.config.dead_zone_min_separation,
            max_movable_points=self.config.max_movable_points,
            add_min_spacing=self.config.add_min_spacing,
            drag_min_spacing=self.config.drag_min_spacing,
        )
        if clock is None:
            self.throttle = DragThrottle(self.config.drag_throttle_ms)
        else:
            self.throttle = DragThrottle(self.config.drag_throttle_ms, clock)

        self.selected_index: int | None = None
        self._drag_target: tuple[float, float] | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self.aggregator.editable

    @property
    def state(self) -> EditorState:
        agg = self.aggregator
        mixed = agg.mixed.model_copy()
        return EditorState(
            status=agg.status,
            enabled=agg.editable,
            mixed=mixed,
            inner=None if mixed.inner else agg.dead_zone.inner,
            outer=None if mixed.outer else agg.dead_zone.outer,
            use_smooth=None if mixed.smooth else agg.curve.use_smooth,
            points=agg.curve.to_pairs(),
            selected_index=self.selected_index,
            movable_count=agg.curve.movable_count,
        )

    def load_selection(self, records: Sequence[MappingRecord]) -> EditorState:
        """Load the records selected in the mapping list."""
        self.selected_index = None
        self._drag_target = None
        self.throttle.reset()

        status = self.aggregator.load(records)
        notice = _DISABLED_NOTICES.get(status)
        if notice is not None:
            self.notifier.notify(notice)
        logger.debug(f"Loaded selection of {len(records)} record(s): {status.value}")
        return self.state

    def _commit(self) -> EditorState:
        records = self.aggregator.apply()
        if records and self.coordinator is not None:
            self.coordinator.schedule_push(records)
        return self.state

    def _reject(self, error: CurveValidationError) -> EditorState:
        if isinstance(error, CurveCapacityError):
            notice = Notice.warning("Point Limit", str(error))
        else:
            notice = Notice.warning("Invalid Point", str(error))
        logger.debug(f"Rejected curve edit: {error}")
        self.notifier.notify(notice)
        return self.state

    # ------------------------------------------------------------------
    # Curve pointer events
    # ------------------------------------------------------------------

    def on_pointer_press(self, x: float, y: float) -> EditorState:
        """Select the point under the pointer, or add a new one there.

        Pressing an anchor selects nothing. A mixed curve is first replaced
        with the default curve.
        """
        if not self.enabled:
            return self.state

        curve = self.aggregator.curve
        exited = self.aggregator.exit_curve_mixed()
        if exited:
            curve = self.aggregator.curve
            self.selected_index = None

        hit = curve.find_near(x, y, self.hit_radius)
        if hit is not None:
            self.selected_index = None if curve.points[hit].is_fixed else hit
            return self._commit() if exited else self.state

        try:
            self.selected_index = curve.add_point(x, y)
        except CurveValidationError as e:
            if exited:
                self._commit()
            return self._reject(e)
        return self._commit()

    def on_pointer_drag(self, target_x: float, target_y: float) -> EditorState:
        """Provisional move of the selected point (rate limited)."""
        if not self.enabled or self.selected_index is None:
            return self.state

        self._drag_target = (target_x, target_y)
        if self.throttle.ready():
            self._apply_drag_target()
        return self.state

    def _apply_drag_target(self) -> None:
        if self._drag_target is None or self.selected_index is None:
            return
        x, y = self._drag_target
        self._drag_target = None
        try:
            self.selected_index = self.aggregator.curve.move_point(self.selected_index, x, y)
        except CurvePlacementError as e:
            logger.debug(f"Ignored drag: {e}")

    def on_pointer_release(self) -> EditorState:
        """End a drag: apply the last suppressed target and commit."""
        if not self.enabled:
            return self.state
        self._apply_drag_target()
        self.throttle.reset()
        return self._commit()

    # ------------------------------------------------------------------
    # Dead zone and fields
    # ------------------------------------------------------------------

    def on_dead_zone_drag(self, lower: float, upper: float, is_provisional: bool) -> EditorState:
        """Two-handle dead zone slider update.

        Provisional updates are rate limited and not committed; the release
        (``is_provisional=False``) carries the final values and commits.
        """
        if not self.enabled:
            return self.state
        if is_provisional:
            if self.throttle.ready():
                self.aggregator.set_dead_zone(lower, upper)
            return self.state

        self.aggregator.set_dead_zone(lower, upper)
        self.throttle.reset()
        return self._commit()

    def on_field_commit(self, field: EditorField | str, value: float | bool) -> EditorState:
        """Committed edit of one panel field.

        Dead zone values are in percent. Point fields edit the selected point.

        Raises:
            ValueError: If ``field`` is not an editor field.
        """
        if not self.enabled:
            return self.state
        field = EditorField(field)

        if field == EditorField.INNER:
            self.aggregator.set_inner(float(value))
        elif field == EditorField.OUTER:
            self.aggregator.set_outer(float(value))
        elif field == EditorField.SMOOTH:
            self.aggregator.set_smooth(bool(value))
        else:
            if self.selected_index is None:
                return self.state
            curve = self.aggregator.curve
            try:
                if field == EditorField.POINT_X:
                    self.selected_index = curve.set_point_x(self.selected_index, float(value))
                else:
                    self.selected_index = curve.set_point_y(self.selected_index, float(value))
            except CurveValidationError as e:
                return self._reject(e)

        return self._commit()

    def remove_point(self) -> EditorState:
        """Remove the selected point."""
        if not self.enabled or self.selected_index is None:
            return self.state
        try:
            self.aggregator.curve.remove_point(self.selected_index)
        except CurveValidationError as e:
            return self._reject(e)
        self.selected_index = None
        return self._commit()

    def reset_curve(self) -> EditorState:
        """Back to the two anchors with linear evaluation."""
        if not self.enabled:
            return self.state
        self.aggregator.reset_curve()
        self.selected_index = None
        return self._commit()
