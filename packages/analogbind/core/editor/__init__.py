"""Curve and dead-zone editing session."""

from analogbind.core.editor.session import CurveEditorSession, EditorField, EditorState
from analogbind.core.editor.throttle import DragThrottle

__all__ = [
    "CurveEditorSession",
    "DragThrottle",
    "EditorField",
    "EditorState",
]
