"""Drag-and-drop: gesture state machine and collision detection."""

from .collision import (
    Droppable,
    DroppableKind,
    Rect,
    closest_center,
    detect_collision,
    pointer_within,
)
from .controller import ACTIVATION_DISTANCE, DragController, DragPhase, DropResult

__all__ = [
    "ACTIVATION_DISTANCE",
    "DragController",
    "DragPhase",
    "DropResult",
    "Droppable",
    "DroppableKind",
    "Rect",
    "closest_center",
    "detect_collision",
    "pointer_within",
]
