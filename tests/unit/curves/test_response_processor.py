"""Tests for raw input processing."""

from __future__ import annotations

import numpy as np
import pytest

from analogbind.core.curves.models import ANCHOR_END, ANCHOR_START, CurvePoint, ResponseCurve
from analogbind.core.curves.processor import ResponseProcessor, combine_max
from analogbind.core.mapping.models import MappingRecord


@pytest.fixture
def knee_points() -> list[CurvePoint]:
    return [ANCHOR_START, CurvePoint(x=0.5, y=0.8), ANCHOR_END]


class TestDeadZones:
    def test_below_inner_reads_zero(self) -> None:
        proc = ResponseProcessor(dead_zone_inner=0.1, dead_zone_outer=0.9)
        assert proc.process(0.05) == 0.0

    def test_normalizes_between_bounds(self) -> None:
        proc = ResponseProcessor(dead_zone_inner=0.1, dead_zone_outer=0.9)
        assert proc.process(0.5) == pytest.approx(0.5)
        assert proc.process(0.3) == pytest.approx(0.25)

    def test_above_outer_reads_full(self) -> None:
        proc = ResponseProcessor(dead_zone_inner=0.1, dead_zone_outer=0.9)
        assert proc.process(0.95) == pytest.approx(1.0)

    def test_collapsed_range_passes_through(self) -> None:
        proc = ResponseProcessor(dead_zone_inner=0.5, dead_zone_outer=0.5)
        assert proc.normalize(0.7) == pytest.approx(0.5)


class TestCurves:
    def test_linear_has_no_table(self) -> None:
        proc = ResponseProcessor(ResponseCurve.LINEAR, dead_zone_inner=0.0, dead_zone_outer=1.0)
        assert proc.lut is None
        assert proc.process(0.42) == pytest.approx(0.42)

    def test_custom_uses_table(self, knee_points: list[CurvePoint]) -> None:
        proc = ResponseProcessor(
            ResponseCurve.CUSTOM, knee_points, dead_zone_inner=0.0, dead_zone_outer=1.0
        )
        assert proc.lut is not None
        assert len(proc.lut) == 256
        assert proc.process(0.25) == pytest.approx(0.4, abs=1e-6)

    def test_dead_zone_applies_before_curve(self, knee_points: list[CurvePoint]) -> None:
        proc = ResponseProcessor(
            ResponseCurve.CUSTOM, knee_points, dead_zone_inner=0.1, dead_zone_outer=0.9
        )
        # 0.3 normalizes to 0.25, which the curve maps to 0.4
        assert proc.process(0.3) == pytest.approx(0.4, abs=1e-6)

    def test_process_many_matches_process(self, knee_points: list[CurvePoint]) -> None:
        proc = ResponseProcessor(ResponseCurve.CUSTOM, knee_points, use_smooth=True)
        raw = [0.0, 0.03, 0.2, 0.5, 0.8, 0.97, 1.0]
        expected = [proc.process(v) for v in raw]
        np.testing.assert_allclose(proc.process_many(raw), expected, atol=1e-9)

    def test_from_record(self) -> None:
        record = MappingRecord(
            source_key="W",
            output_control="LeftStickUp",
            curve_type=ResponseCurve.CUSTOM,
            custom_points=[(0.0, 0.0), (0.5, 0.8), (1.0, 1.0)],
            dead_zone_inner=0.0,
            dead_zone_outer=1.0,
        )
        proc = ResponseProcessor.from_record(record)
        assert proc.process(0.75) == pytest.approx(0.9, abs=1e-6)


class TestCombineMax:
    def test_largest_wins(self) -> None:
        assert combine_max([0.2, 0.7, 0.5]) == 0.7

    def test_empty_is_zero(self) -> None:
        assert combine_max([]) == 0.0
