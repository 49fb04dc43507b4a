"""Tests for DeadZoneRange."""

from __future__ import annotations

import random

import pytest
from pydantic import ValidationError

from analogbind.core.curves.deadzone import DeadZoneRange


class TestConstruction:
    def test_defaults(self) -> None:
        dz = DeadZoneRange()
        assert (dz.inner, dz.outer, dz.min_separation) == (5.0, 95.0, 5.0)

    def test_too_narrow_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must be <="):
            DeadZoneRange(inner=93, outer=95)

    def test_from_fractions(self) -> None:
        dz = DeadZoneRange.from_fractions(0.1, 0.8)
        assert dz.inner == pytest.approx(10.0)
        assert dz.outer == pytest.approx(80.0)
        assert dz.inner_fraction == pytest.approx(0.1)
        assert dz.outer_fraction == pytest.approx(0.8)

    def test_from_fractions_repairs_narrow_range(self) -> None:
        dz = DeadZoneRange.from_fractions(0.93, 0.95)
        assert dz.outer == pytest.approx(95.0)
        assert dz.inner == pytest.approx(90.0)


class TestSetBounds:
    def test_raising_inner_pushes_outer(self) -> None:
        dz = DeadZoneRange(inner=5, outer=95)
        dz.set_inner(92)
        assert dz.inner == 92.0
        assert dz.outer == 97.0

    def test_lowering_outer_pushes_inner(self) -> None:
        dz = DeadZoneRange(inner=20, outer=95)
        dz.set_outer(22)
        assert dz.outer == 22.0
        assert dz.inner == 17.0

    def test_inner_is_clamped_to_leave_room(self) -> None:
        dz = DeadZoneRange()
        dz.set_inner(100)
        assert dz.inner == 95.0
        assert dz.outer == 100.0

    def test_outer_is_clamped_to_leave_room(self) -> None:
        dz = DeadZoneRange()
        dz.set_outer(0)
        assert dz.outer == 5.0
        assert dz.inner == 0.0

    def test_independent_moves(self) -> None:
        dz = DeadZoneRange()
        dz.set_inner(30)
        dz.set_outer(60)
        assert (dz.inner, dz.outer) == (30.0, 60.0)

    def test_set_both(self) -> None:
        dz = DeadZoneRange()
        dz.set_both(40, 42)
        assert dz.inner == 40.0
        assert dz.outer == 45.0


class TestSeparationInvariant:
    @pytest.mark.parametrize("seed", [3, 11, 99])
    def test_random_mutations(self, seed: int) -> None:
        rng = random.Random(seed)
        dz = DeadZoneRange()
        for _ in range(500):
            value = rng.uniform(-20, 120)
            if rng.random() < 0.5:
                dz.set_inner(value)
            else:
                dz.set_outer(value)
            assert 0.0 <= dz.inner <= dz.outer - dz.min_separation + 1e-9
            assert dz.outer <= 100.0
