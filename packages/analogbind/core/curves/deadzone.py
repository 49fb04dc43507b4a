"""Dual-bound dead zone."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from analogbind.core.utils.math import clamp

DEFAULT_INNER = 5.0
DEFAULT_OUTER = 95.0
MIN_SEPARATION = 5.0


class DeadZoneRange(BaseModel):
    """Inner and outer dead zone bounds in percent.

    The bounds always satisfy ``inner <= outer - min_separation``. Setting
    one bound past the other pushes the other bound by the deficit, each
    clamped to [0, 100].

    Attributes:
        inner: Lower bound in percent; raw input below it reads as zero.
        outer: Upper bound in percent; raw input above it reads as full.
        min_separation: Minimum gap between the bounds in percent.

    Example:
        >>> dz = DeadZoneRange(inner=5, outer=95)
        >>> dz.set_inner(92)
        >>> (dz.inner, dz.outer)
        (92.0, 97.0)
    """

    model_config = ConfigDict(extra="forbid")

    inner: float = Field(default=DEFAULT_INNER, ge=0.0, le=100.0)
    outer: float = Field(default=DEFAULT_OUTER, ge=0.0, le=100.0)
    min_separation: float = Field(default=MIN_SEPARATION, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def _validate_separation(self) -> DeadZoneRange:
        if self.inner > self.outer - self.min_separation:
            raise ValueError(
                f"inner ({self.inner}) must be <= outer ({self.outer}) - {self.min_separation}"
            )
        return self

    @classmethod
    def from_fractions(
        cls, inner: float, outer: float, min_separation: float = MIN_SEPARATION
    ) -> DeadZoneRange:
        """Build from stored fractions (0..1), repairing a too-narrow range.

        The outer bound is kept where possible and the inner bound is lowered.
        """
        outer_pct = clamp(outer * 100.0, min_separation, 100.0)
        inner_pct = clamp(inner * 100.0, 0.0, outer_pct - min_separation)
        return cls(inner=inner_pct, outer=outer_pct, min_separation=min_separation)

    @property
    def inner_fraction(self) -> float:
        return self.inner / 100.0

    @property
    def outer_fraction(self) -> float:
        return self.outer / 100.0

    def set_inner(self, value: float) -> None:
        """Set the inner bound, pushing the outer bound up if needed."""
        self.inner = clamp(float(value), 0.0, 100.0 - self.min_separation)
        if self.inner > self.outer - self.min_separation:
            self.outer = min(100.0, self.inner + self.min_separation)

    def set_outer(self, value: float) -> None:
        """Set the outer bound, pushing the inner bound down if needed."""
        self.outer = clamp(float(value), self.min_separation, 100.0)
        if self.inner > self.outer - self.min_separation:
            self.inner = max(0.0, self.outer - self.min_separation)

    def set_both(self, inner: float, outer: float) -> None:
        """Apply a two-handle update; the inner handle wins on overlap."""
        self.set_outer(outer)
        self.set_inner(inner)
