"""Raw input processing: dead zones, then the response curve."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np

from analogbind.core.curves.evaluation import build_lut, lut_lookup
from analogbind.core.curves.models import CurvePoint, ResponseCurve
from analogbind.core.curves.solver import sort_points

if TYPE_CHECKING:
    from analogbind.core.mapping.models import MappingRecord

LUT_SIZE = 256


class ResponseProcessor:
    """Turns a raw analog reading into an output value.

    Dead zones are applied first: readings below ``dead_zone_inner`` read as
    zero, readings above ``dead_zone_outer`` are capped, and the remainder is
    normalized to [0, 1]. Linear curves pass the normalized value through;
    custom curves are sampled once into a lookup table.

    Args:
        curve_type: LINEAR or CUSTOM.
        points: Control points for CUSTOM curves.
        use_smooth: Hermite interpolation for CUSTOM curves.
        dead_zone_inner: Inner bound as a fraction (0..1).
        dead_zone_outer: Outer bound as a fraction (0..1).
        lut_size: Lookup table resolution.

    Example:
        >>> proc = ResponseProcessor(ResponseCurve.LINEAR, dead_zone_inner=0.0, dead_zone_outer=1.0)
        >>> proc.process(0.5)
        0.5
    """

    def __init__(
        self,
        curve_type: ResponseCurve = ResponseCurve.LINEAR,
        points: Sequence[CurvePoint] | None = None,
        use_smooth: bool = False,
        dead_zone_inner: float = 0.05,
        dead_zone_outer: float = 0.95,
        lut_size: int = LUT_SIZE,
    ) -> None:
        self.curve_type = curve_type
        self.points = sort_points(points or [])
        self.use_smooth = use_smooth
        self.dead_zone_inner = dead_zone_inner
        self.dead_zone_outer = dead_zone_outer

        self._lut: np.ndarray | None = None
        if curve_type == ResponseCurve.CUSTOM and self.points:
            self._lut = build_lut(self.points, use_smooth, lut_size)

    @classmethod
    def from_record(cls, record: MappingRecord, lut_size: int = LUT_SIZE) -> ResponseProcessor:
        """Build a processor for a mapping record's current settings."""
        return cls(
            curve_type=record.curve_type,
            points=record.curve_points(),
            use_smooth=record.use_smooth_curve,
            dead_zone_inner=record.dead_zone_inner,
            dead_zone_outer=record.dead_zone_outer,
            lut_size=lut_size,
        )

    @property
    def lut(self) -> np.ndarray | None:
        return self._lut

    def normalize(self, raw: float) -> float:
        """Apply the dead zones to a raw reading."""
        if raw < self.dead_zone_inner:
            return 0.0
        capped = min(raw, self.dead_zone_outer)
        if self.dead_zone_outer > self.dead_zone_inner:
            return (capped - self.dead_zone_inner) / (self.dead_zone_outer - self.dead_zone_inner)
        return capped

    def apply_curve(self, value: float) -> float:
        if self._lut is None:
            return value
        return float(lut_lookup(self._lut, value))

    def process(self, raw: float) -> float:
        """Dead zones, then the curve."""
        return self.apply_curve(self.normalize(raw))

    def process_many(self, raw: Iterable[float] | np.ndarray) -> np.ndarray:
        """Vectorized process() over an array of readings."""
        values = np.asarray(list(raw) if not isinstance(raw, np.ndarray) else raw, dtype=float)
        inner, outer = self.dead_zone_inner, self.dead_zone_outer

        capped = np.minimum(values, outer)
        if outer > inner:
            normalized = (capped - inner) / (outer - inner)
        else:
            normalized = capped
        normalized = np.where(values < inner, 0.0, normalized)

        if self._lut is None:
            return normalized
        return np.asarray(lut_lookup(self._lut, normalized), dtype=float)


def combine_max(values: Iterable[float]) -> float:
    """Merge several sources driving one output control (largest wins)."""
    return max(values, default=0.0)
