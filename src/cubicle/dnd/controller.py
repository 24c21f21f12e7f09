"""Drag gesture state machine."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from .collision import Droppable, Point, Rect, detect_collision

logger = logging.getLogger(__name__)

# Pointer travel (in cells) before a press turns into a drag
ACTIVATION_DISTANCE = 5


class DragPhase(str, Enum):
    """Phases of a single drag gesture."""

    IDLE = "idle"
    PENDING = "pending"  # pressed, not yet past the activation distance
    DRAGGING = "dragging"
    DROPPED_VALID = "dropped_valid"
    DROPPED_INVALID = "dropped_invalid"


@dataclass(frozen=True)
class DropResult:
    """Outcome of a finished gesture."""

    task_id: str
    phase: DragPhase
    target: Droppable | None = None

    @property
    def valid(self) -> bool:
        return self.phase == DragPhase.DROPPED_VALID


class DragController:
    """Tracks one drag gesture at a time.

    Idle -> Pending -> Dragging -> Dropped-Valid | Dropped-Invalid -> Idle.
    The ghost rectangle follows the pointer while dragging; it is
    presentation only. Nothing is persisted here: a valid DropResult is
    handed to the board store by the caller.
    """

    def __init__(self, activation_distance: float = ACTIVATION_DISTANCE) -> None:
        self.activation_distance = activation_distance
        self._phase = DragPhase.IDLE
        self._task_id: str | None = None
        self._origin: Point = (0, 0)
        self._pointer: Point = (0, 0)
        self._source_rect: Rect | None = None

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def task_id(self) -> str | None:
        return self._task_id

    @property
    def is_dragging(self) -> bool:
        return self._phase == DragPhase.DRAGGING

    @property
    def ghost_rect(self) -> Rect | None:
        """Where the dragged card is drawn, or None when not dragging."""
        if self._phase != DragPhase.DRAGGING or self._source_rect is None:
            return None
        dx = self._pointer[0] - self._origin[0]
        dy = self._pointer[1] - self._origin[1]
        return self._source_rect.translate(dx, dy)

    def press(self, task_id: str, pointer: Point, source_rect: Rect | None = None) -> None:
        """Pointer pressed on a task card. Ignored if a gesture is active.

        Without source_rect no ghost is drawn and drops collide on the
        pointer alone.
        """
        if self._phase != DragPhase.IDLE:
            logger.debug("press ignored, gesture already active: %s", self._task_id)
            return
        self._phase = DragPhase.PENDING
        self._task_id = task_id
        self._origin = pointer
        self._pointer = pointer
        self._source_rect = source_rect

    def move(self, pointer: Point) -> Rect | None:
        """Pointer moved. Returns the ghost rectangle while dragging."""
        if self._phase == DragPhase.IDLE:
            return None
        self._pointer = pointer
        if self._phase == DragPhase.PENDING:
            travelled = math.hypot(pointer[0] - self._origin[0], pointer[1] - self._origin[1])
            if travelled >= self.activation_distance:
                self._phase = DragPhase.DRAGGING
                logger.debug("Drag started: %s", self._task_id)
        return self.ghost_rect

    def release(
        self,
        pointer: Point,
        droppables: list[Droppable],
        bounds: Rect | None = None,
    ) -> DropResult | None:
        """Pointer released. Resolves the drop target and resets to idle.

        Returns:
            None for a plain click (never passed the activation distance)
            or when no gesture was active; otherwise the DropResult.
        """
        if self._phase == DragPhase.IDLE or self._task_id is None:
            return None
        if self._phase == DragPhase.PENDING:
            self._reset()
            return None

        self._pointer = pointer
        # A drag without a source card has only the pointer to collide with
        ghost = self.ghost_rect or Rect(pointer[0], pointer[1], 0, 0)
        target = detect_collision(pointer, ghost, droppables, bounds)
        task_id = self._task_id

        if target is None or target.id == task_id:
            self._phase = DragPhase.DROPPED_INVALID
            result = DropResult(task_id, DragPhase.DROPPED_INVALID, target)
        else:
            self._phase = DragPhase.DROPPED_VALID
            result = DropResult(task_id, DragPhase.DROPPED_VALID, target)
        logger.debug(
            "Drop %s: %s -> %s", result.phase.value, task_id, target.id if target else None
        )
        self._reset()
        return result

    def cancel(self) -> None:
        """Abandon the current gesture without dropping."""
        if self._phase != DragPhase.IDLE:
            logger.debug("Drag cancelled: %s", self._task_id)
        self._reset()

    def _reset(self) -> None:
        self._phase = DragPhase.IDLE
        self._task_id = None
        self._source_rect = None
