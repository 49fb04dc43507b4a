"""Response curves, dead zones and the point spacing solver."""

from analogbind.core.curves.curve_model import CurveModel
from analogbind.core.curves.deadzone import DeadZoneRange
from analogbind.core.curves.errors import (
    CurveCapacityError,
    CurvePlacementError,
    CurveValidationError,
)
from analogbind.core.curves.evaluation import (
    build_lut,
    evaluate_curve,
    hermite_basis,
    interpolate_linear,
    interpolate_smooth,
    lut_lookup,
)
from analogbind.core.curves.models import (
    ADD_MIN_SPACING,
    ANCHOR_END,
    ANCHOR_START,
    DEFAULT_ANCHORS,
    DRAG_MIN_SPACING,
    MAX_MOVABLE_POINTS,
    MAX_PAYLOAD_POINTS,
    CurvePoint,
    ResponseCurve,
)
from analogbind.core.curves.processor import ResponseProcessor, combine_max
from analogbind.core.curves.solver import SpacingSolver, sort_points

__all__ = [
    # Models
    "ADD_MIN_SPACING",
    "ANCHOR_END",
    "ANCHOR_START",
    "DEFAULT_ANCHORS",
    "DRAG_MIN_SPACING",
    "MAX_MOVABLE_POINTS",
    "MAX_PAYLOAD_POINTS",
    "CurvePoint",
    "ResponseCurve",
    # Editing
    "CurveModel",
    "DeadZoneRange",
    "SpacingSolver",
    "sort_points",
    # Evaluation
    "build_lut",
    "evaluate_curve",
    "hermite_basis",
    "interpolate_linear",
    "interpolate_smooth",
    "lut_lookup",
    "ResponseProcessor",
    "combine_max",
    # Errors
    "CurveCapacityError",
    "CurvePlacementError",
    "CurveValidationError",
]
