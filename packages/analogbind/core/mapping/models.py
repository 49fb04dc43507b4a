"""Mapping record models.

- MappingScope: the profile / sub-profile pair that owns a collection
- MappingPayload: the record shape exchanged with a backend store
- MappingRecord: one editable binding (source key -> output control)
- PendingOverride: an edit buffered until it can be committed
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from analogbind.core.curves.curve_model import CurveModel
from analogbind.core.curves.deadzone import DeadZoneRange
from analogbind.core.curves.models import MAX_PAYLOAD_POINTS, CurvePoint, ResponseCurve

# Sentinel for records the backend has not timestamped
UNSET_CREATED_AT = datetime.min.replace(tzinfo=UTC)

# Smallest step used to make colliding timestamps unique
TIMESTAMP_BUMP = timedelta(milliseconds=1)

DEFAULT_DEAD_ZONE_INNER = 0.05
DEFAULT_DEAD_ZONE_OUTER = 0.95

_ANALOG_MARKERS = ("stick", "trigger")

Pairs = list[tuple[float, float]]


class ValidationState(str, Enum):
    """Display state of a record."""

    INVALID = "invalid"
    WARNING = "warning"
    VALID = "valid"


class MappingScope(BaseModel):
    """Profile and sub-profile owning a set of mappings.

    Example:
        >>> scope = MappingScope(profile_id="racing", sub_profile_id="default")
        >>> str(scope)
        'racing/default'
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    profile_id: str = Field(..., min_length=1)
    sub_profile_id: str = Field(..., min_length=1)

    def __str__(self) -> str:
        return f"{self.profile_id}/{self.sub_profile_id}"


class MappingPayload(BaseModel):
    """Record shape exchanged with a backend store.

    ``created_at`` is None when the client has not assigned one; the store
    then assigns its own.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    source_key: str = Field(..., min_length=1)
    output_control: str = Field(..., min_length=1)
    curve_type: ResponseCurve = ResponseCurve.LINEAR
    custom_points: list[tuple[float, float]] = Field(
        default_factory=list, max_length=MAX_PAYLOAD_POINTS
    )
    dead_zone_inner: float = Field(default=DEFAULT_DEAD_ZONE_INNER, ge=0.0, le=1.0)
    dead_zone_outer: float = Field(default=DEFAULT_DEAD_ZONE_OUTER, ge=0.0, le=1.0)
    use_smooth_curve: bool = False
    created_at: datetime | None = None


class MappingRecord(BaseModel):
    """One binding from a source key to an output control.

    Records are owned by their sub-profile collection and mutated in place by
    the editor and the sync coordinator. ``created_at`` is the identity that
    survives reloads; ``original_*`` fields hold the values last confirmed by
    the backend.

    Attributes:
        source_key: Input key name, or None while incomplete.
        output_control: Output control name, or None while incomplete.
        curve_type: LINEAR, or CUSTOM with ``custom_points``.
        custom_points: (x, y) pairs including the anchors, or None.
        dead_zone_inner: Inner dead zone as a fraction (0..1).
        dead_zone_outer: Outer dead zone as a fraction (0..1).
        use_smooth_curve: Hermite evaluation for custom curves.
        created_at: Stable identity across reloads.
        original_source_key: Source key last confirmed by the backend.
        original_output_control: Output control last confirmed by the backend.
        has_warning: Set by the conflict scan on duplicate source keys.
    """

    model_config = ConfigDict(extra="forbid")

    source_key: str | None = None
    output_control: str | None = None
    curve_type: ResponseCurve = ResponseCurve.LINEAR
    custom_points: Pairs | None = None
    dead_zone_inner: float = DEFAULT_DEAD_ZONE_INNER
    dead_zone_outer: float = DEFAULT_DEAD_ZONE_OUTER
    use_smooth_curve: bool = False
    created_at: datetime = UNSET_CREATED_AT
    original_source_key: str | None = None
    original_output_control: str | None = None
    has_warning: bool = False

    @property
    def is_valid(self) -> bool:
        """Both the source key and the output control are set."""
        return bool(self.source_key) and bool(self.output_control)

    @property
    def is_analog(self) -> bool:
        """Output control is a stick or trigger (curves only apply to these)."""
        if not self.output_control:
            return False
        control = self.output_control.lower()
        return any(marker in control for marker in _ANALOG_MARKERS)

    @property
    def has_been_modified(self) -> bool:
        """Key or control differs from what the backend last confirmed."""
        return (self.source_key or None) != (self.original_source_key or None) or (
            self.output_control or None
        ) != (self.original_output_control or None)

    @property
    def has_created_at(self) -> bool:
        return self.created_at != UNSET_CREATED_AT

    @property
    def validation_state(self) -> ValidationState:
        if not self.is_valid:
            return ValidationState.INVALID
        if self.has_warning:
            return ValidationState.WARNING
        return ValidationState.VALID

    def mark_as_original(self, payload: MappingPayload | None = None) -> None:
        """Record a key and control as backend-confirmed.

        With ``payload``, the confirmed values are the ones that were pushed,
        so an edit made while the push was in flight still reads as modified.
        """
        if payload is None:
            self.original_source_key = self.source_key
            self.original_output_control = self.output_control
        else:
            self.original_source_key = payload.source_key
            self.original_output_control = payload.output_control

    def curve_points(self) -> list[CurvePoint]:
        """Stored custom points as CurvePoints (anchors marked fixed)."""
        return list(CurveModel.from_pairs(self.custom_points).points)

    def curve_model(self, **kwargs) -> CurveModel:
        """An editable copy of this record's curve."""
        pairs = self.custom_points if self.curve_type == ResponseCurve.CUSTOM else None
        return CurveModel.from_pairs(pairs, self.use_smooth_curve, **kwargs)

    def apply_curve(self, curve: CurveModel) -> None:
        """Encode an edited curve onto this record.

        Any movable point makes the record CUSTOM with the full point list.
        A curve with only the anchors makes it LINEAR with no points.
        """
        if curve.movable_count > 0:
            self.curve_type = ResponseCurve.CUSTOM
            self.custom_points = curve.to_pairs()
        else:
            if self.curve_type == ResponseCurve.CUSTOM:
                self.curve_type = ResponseCurve.LINEAR
            self.custom_points = None

    def dead_zone_range(self, min_separation: float = 5.0) -> DeadZoneRange:
        return DeadZoneRange.from_fractions(
            self.dead_zone_inner, self.dead_zone_outer, min_separation
        )

    def apply_dead_zone(self, dead_zone: DeadZoneRange) -> None:
        self.dead_zone_inner = dead_zone.inner_fraction
        self.dead_zone_outer = dead_zone.outer_fraction

    def to_payload(self) -> MappingPayload:
        """Exchange shape for a backend push.

        Raises:
            ValueError: If the record is incomplete.
        """
        if not self.is_valid:
            raise ValueError("Cannot build a payload for an incomplete mapping")
        return MappingPayload(
            source_key=self.source_key,
            output_control=self.output_control,
            curve_type=self.curve_type,
            custom_points=list(self.custom_points or [])[:MAX_PAYLOAD_POINTS],
            dead_zone_inner=self.dead_zone_inner,
            dead_zone_outer=self.dead_zone_outer,
            use_smooth_curve=self.use_smooth_curve,
            created_at=self.created_at if self.has_created_at else None,
        )

    @classmethod
    def from_payload(cls, payload: MappingPayload) -> MappingRecord:
        """Hydrate a record from a backend listing entry (not yet marked original)."""
        return cls(
            source_key=payload.source_key,
            output_control=payload.output_control,
            curve_type=payload.curve_type,
            custom_points=list(payload.custom_points[:MAX_PAYLOAD_POINTS]) or None,
            dead_zone_inner=payload.dead_zone_inner,
            dead_zone_outer=payload.dead_zone_outer,
            use_smooth_curve=payload.use_smooth_curve,
            created_at=payload.created_at or UNSET_CREATED_AT,
        )

    def describe(self) -> str:
        """Short curve summary, e.g. ``Custom (3 pts, smooth), DZ 5%-95%``."""
        if self.curve_type == ResponseCurve.CUSTOM and self.custom_points:
            mode = "smooth" if self.use_smooth_curve else "linear"
            curve = f"Custom ({len(self.custom_points)} pts, {mode})"
        else:
            curve = self.curve_type.value
        if self.dead_zone_inner > 0.01 or self.dead_zone_outer < 0.99:
            dz = f"DZ {self.dead_zone_inner:.0%}-{self.dead_zone_outer:.0%}"
        else:
            dz = "No DZ"
        return f"{curve}, {dz}"


class PendingOverride(BaseModel):
    """An edit held back from the backend.

    Keyed by the owning record's ``created_at`` in the PendingOverrideStore.
    ``original_key_in_backend`` is the key the backend still holds for this
    record, used to remove it once the edit can be committed.
    """

    model_config = ConfigDict(extra="forbid")

    scope: MappingScope
    source_key: str | None = None
    output_control: str | None = None
    curve_type: ResponseCurve = ResponseCurve.LINEAR
    custom_points: Pairs | None = None
    dead_zone_inner: float = DEFAULT_DEAD_ZONE_INNER
    dead_zone_outer: float = DEFAULT_DEAD_ZONE_OUTER
    use_smooth_curve: bool = False
    original_key_in_backend: str | None = None

    @classmethod
    def capture(cls, record: MappingRecord, scope: MappingScope) -> PendingOverride:
        """Snapshot a record's editable fields."""
        return cls(
            scope=scope,
            original_key_in_backend=record.original_source_key,
            **_editable_fields(record),
        )

    def update_from(self, record: MappingRecord) -> None:
        """Refresh buffered fields, keeping the backend key."""
        for name, value in _editable_fields(record).items():
            setattr(self, name, value)

    def apply_to(self, record: MappingRecord) -> None:
        """Overwrite a record's editable fields with the buffered values."""
        for name in _EDITABLE_FIELDS:
            value = getattr(self, name)
            setattr(record, name, list(value) if isinstance(value, list) else value)

    def to_record(self, created_at: datetime) -> MappingRecord:
        """Materialize as a record the backend has not echoed back yet."""
        record = MappingRecord(
            created_at=created_at, original_source_key=self.original_key_in_backend
        )
        self.apply_to(record)
        return record


_EDITABLE_FIELDS = (
    "source_key",
    "output_control",
    "curve_type",
    "custom_points",
    "dead_zone_inner",
    "dead_zone_outer",
    "use_smooth_curve",
)


def _editable_fields(record: MappingRecord) -> dict:
    fields = {name: getattr(record, name) for name in _EDITABLE_FIELDS}
    if fields["custom_points"] is not None:
        fields["custom_points"] = list(fields["custom_points"])
    return fields


class ListedMapping(BaseModel):
    """One entry of a backend listing: the stored payload and its position."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    payload: MappingPayload
    index: int = Field(..., ge=0)
