"""Curve primitives for analog response shaping.

This module defines the value types shared by the curve editor, the
evaluators and the mapping records:
- CurvePoint: a control point (x, y) in [0,1] x [0,1]
- ResponseCurve: how a record encodes its curve (LINEAR or CUSTOM)
- Anchor constants: the fixed endpoints every curve carries
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Limits used by the editor and solver
MAX_MOVABLE_POINTS = 12
DRAG_MIN_SPACING = 0.01
ADD_MIN_SPACING = 0.02
MAX_PAYLOAD_POINTS = 16
SPACING_EPSILON = 1e-12


class ResponseCurve(str, Enum):
    """Curve encoding stored on a mapping record."""

    LINEAR = "Linear"
    CUSTOM = "Custom"


class CurvePoint(BaseModel):
    """A single control point on a response curve.

    Both coordinates are normalized to [0, 1]. Fixed points are the two
    anchors; they never move and cannot be removed.

    Attributes:
        x: Normalized input in range [0, 1].
        y: Normalized output in range [0, 1].
        is_fixed: True for the (0, 0) and (1, 1) anchors.

    Example:
        >>> point = CurvePoint(x=0.5, y=0.8)
        >>> point.is_fixed
        False
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    x: float = Field(..., ge=0.0, le=1.0, description="Normalized input [0,1]")
    y: float = Field(..., ge=0.0, le=1.0, description="Normalized output [0,1]")
    is_fixed: bool = False

    def moved(self, x: float, y: float) -> CurvePoint:
        """Return a copy of this point at a new position."""
        return CurvePoint(x=x, y=y, is_fixed=self.is_fixed)

    def as_pair(self) -> tuple[float, float]:
        return (self.x, self.y)


ANCHOR_START = CurvePoint(x=0.0, y=0.0, is_fixed=True)
ANCHOR_END = CurvePoint(x=1.0, y=1.0, is_fixed=True)
DEFAULT_ANCHORS: tuple[CurvePoint, CurvePoint] = (ANCHOR_START, ANCHOR_END)


def is_anchor_position(x: float, y: float) -> bool:
    """Whether (x, y) is exactly one of the anchor positions."""
    return (x == 0.0 and y == 0.0) or (x == 1.0 and y == 1.0)
