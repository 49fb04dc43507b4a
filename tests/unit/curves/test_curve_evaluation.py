"""Tests for linear and Hermite curve evaluation."""

from __future__ import annotations

import numpy as np
import pytest

from analogbind.core.curves.evaluation import (
    build_lut,
    evaluate_curve,
    hermite_basis,
    interpolate_linear,
    interpolate_smooth,
    lut_lookup,
)
from analogbind.core.curves.models import ANCHOR_END, ANCHOR_START, CurvePoint


@pytest.fixture
def anchors() -> list[CurvePoint]:
    return [ANCHOR_START, ANCHOR_END]


@pytest.fixture
def knee_points() -> list[CurvePoint]:
    """Anchors plus one point at (0.5, 0.8)."""
    return [ANCHOR_START, CurvePoint(x=0.5, y=0.8), ANCHOR_END]


@pytest.fixture
def s_curve_points() -> list[CurvePoint]:
    return [
        ANCHOR_START,
        CurvePoint(x=0.2, y=0.05),
        CurvePoint(x=0.5, y=0.5),
        CurvePoint(x=0.8, y=0.95),
        ANCHOR_END,
    ]


class TestHermiteBasis:
    """Tests for the cubic Hermite basis."""

    def test_endpoints(self) -> None:
        assert hermite_basis(0.0) == (1.0, 0.0, 0.0, 0.0)
        assert hermite_basis(1.0) == (0.0, 0.0, 1.0, 0.0)

    def test_partition_of_unity(self) -> None:
        """h00 + h01 is always 1."""
        for t in np.linspace(0.0, 1.0, 11):
            h00, _, h01, _ = hermite_basis(float(t))
            assert h00 + h01 == pytest.approx(1.0)


class TestLinearEvaluation:
    """Tests for piecewise-linear evaluation."""

    def test_identity_with_anchors_only(self, anchors: list[CurvePoint]) -> None:
        for t in np.linspace(0.0, 1.0, 21):
            assert interpolate_linear(anchors, float(t)) == pytest.approx(float(t))

    def test_knee_scenario(self, knee_points: list[CurvePoint]) -> None:
        assert interpolate_linear(knee_points, 0.25) == pytest.approx(0.4)
        assert interpolate_linear(knee_points, 0.75) == pytest.approx(0.9)

    def test_knots_are_exact(self, s_curve_points: list[CurvePoint]) -> None:
        for p in s_curve_points:
            assert interpolate_linear(s_curve_points, p.x) == pytest.approx(p.y)

    def test_outside_points_holds_end_values(self) -> None:
        points = [CurvePoint(x=0.2, y=0.3), CurvePoint(x=0.8, y=0.6)]
        assert interpolate_linear(points, 0.0) == pytest.approx(0.3)
        assert interpolate_linear(points, 1.0) == pytest.approx(0.6)

    def test_empty_points_raises(self) -> None:
        with pytest.raises(ValueError, match="points cannot be empty"):
            interpolate_linear([], 0.5)

    @pytest.mark.parametrize("t", [-0.5, -1e-9, 1.0 + 1e-9, 1.5])
    def test_t_outside_unit_range_clamps(self, knee_points: list[CurvePoint], t: float) -> None:
        expected = 0.0 if t < 0 else 1.0
        assert interpolate_linear(knee_points, t) == pytest.approx(expected)
        assert interpolate_smooth(knee_points, t) == pytest.approx(expected)


class TestSmoothEvaluation:
    """Tests for Hermite evaluation."""

    def test_identity_with_anchors_only(self, anchors: list[CurvePoint]) -> None:
        for t in np.linspace(0.0, 1.0, 21):
            assert interpolate_smooth(anchors, float(t)) == pytest.approx(float(t))

    def test_knots_are_exact(self, s_curve_points: list[CurvePoint]) -> None:
        for p in s_curve_points:
            assert interpolate_smooth(s_curve_points, p.x) == pytest.approx(p.y)

    def test_output_is_clamped(self) -> None:
        """Steep neighbors would overshoot without the clamp."""
        points = [
            ANCHOR_START,
            CurvePoint(x=0.1, y=1.0),
            CurvePoint(x=0.9, y=1.0),
            ANCHOR_END,
        ]
        for t in np.linspace(0.0, 1.0, 101):
            assert 0.0 <= interpolate_smooth(points, float(t)) <= 1.0

    def test_differs_from_linear_between_knots(self, knee_points: list[CurvePoint]) -> None:
        assert interpolate_smooth(knee_points, 0.25) != pytest.approx(
            interpolate_linear(knee_points, 0.25)
        )


class TestEvaluateCurve:
    def test_dispatches_on_mode(self, knee_points: list[CurvePoint]) -> None:
        assert evaluate_curve(knee_points, 0.25) == interpolate_linear(knee_points, 0.25)
        assert evaluate_curve(knee_points, 0.25, use_smooth=True) == interpolate_smooth(
            knee_points, 0.25
        )


class TestLookupTable:
    """Tests for LUT sampling and lookup."""

    def test_default_size(self, knee_points: list[CurvePoint]) -> None:
        table = build_lut(knee_points, use_smooth=False)
        assert table.shape == (256,)
        assert table[0] == pytest.approx(0.0)
        assert table[-1] == pytest.approx(1.0)

    def test_lookup_matches_linear_curve(self, knee_points: list[CurvePoint]) -> None:
        table = build_lut(knee_points, use_smooth=False)
        assert lut_lookup(table, 0.25) == pytest.approx(0.4, abs=1e-6)
        assert lut_lookup(table, 0.75) == pytest.approx(0.9, abs=1e-6)

    def test_lookup_clamps_inputs(self, knee_points: list[CurvePoint]) -> None:
        table = build_lut(knee_points, use_smooth=True)
        assert lut_lookup(table, -0.5) == pytest.approx(0.0)
        assert lut_lookup(table, 2.0) == pytest.approx(1.0)

    def test_lookup_vectorized(self, knee_points: list[CurvePoint]) -> None:
        table = build_lut(knee_points, use_smooth=False)
        result = lut_lookup(table, np.array([0.0, 0.25, 1.0]))
        assert isinstance(result, np.ndarray)
        np.testing.assert_allclose(result, [0.0, 0.4, 1.0], atol=1e-6)

    def test_size_too_small_raises(self, knee_points: list[CurvePoint]) -> None:
        with pytest.raises(ValueError, match="size must be >= 2"):
            build_lut(knee_points, use_smooth=False, size=1)
