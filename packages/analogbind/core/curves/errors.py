"""Curve editing errors.

All of these are recoverable: the editor catches them, reports a notice and
keeps the last valid curve.
"""

from __future__ import annotations


class CurveValidationError(ValueError):
    """Base class for rejected curve edits."""


class CurvePlacementError(CurveValidationError):
    """Point placement rejected (too close, anchor edit, or unknown index)."""


class CurveCapacityError(CurveValidationError):
    """No room for another movable point."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Only {limit} adjustable points are supported")
