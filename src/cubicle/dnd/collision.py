"""Collision detection for task drops.

Two tiers: droppables under the pointer win; when the pointer is over
nothing (empty space, a gap between sparse columns) the droppable whose
center is closest to the dragged ghost's center is used.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

Point = tuple[float, float]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in screen cells."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def corners(self) -> tuple[Point, Point, Point, Point]:
        return (
            (self.x, self.y),
            (self.right, self.y),
            (self.x, self.bottom),
            (self.right, self.bottom),
        )

    def contains(self, point: Point) -> bool:
        px, py = point
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def translate(self, dx: float, dy: float) -> Rect:
        return Rect(self.x + dx, self.y + dy, self.width, self.height)


class DroppableKind(str, Enum):
    """What a drop target represents."""

    TASK = "task"
    COLUMN = "column"


@dataclass(frozen=True)
class Droppable:
    """A region that accepts drops.

    For a task, column_id is the column holding it; for a column it is
    the column's own id.
    """

    id: str
    kind: DroppableKind
    column_id: str
    rect: Rect


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def pointer_within(pointer: Point, droppables: list[Droppable]) -> list[Droppable]:
    """Droppables containing the pointer, nearest first.

    Nearness is the mean distance from the pointer to the rectangle's
    four corners, which ranks a card above the column that contains it.
    """
    hits = []
    for droppable in droppables:
        if droppable.rect.contains(pointer):
            corners = droppable.rect.corners
            score = sum(_distance(pointer, c) for c in corners) / len(corners)
            hits.append((score, droppable))
    hits.sort(key=lambda hit: hit[0])
    return [droppable for _, droppable in hits]


def closest_center(active: Rect, droppables: list[Droppable]) -> list[Droppable]:
    """All droppables ordered by center distance to the dragged rectangle."""
    center = active.center
    return sorted(droppables, key=lambda d: _distance(center, d.rect.center))


def detect_collision(
    pointer: Point | None,
    active: Rect,
    droppables: list[Droppable],
    bounds: Rect | None = None,
) -> Droppable | None:
    """Pick the drop target for a gesture.

    Args:
        pointer: Pointer position at release, if known
        active: The dragged ghost rectangle
        droppables: Candidate targets
        bounds: Drop area; a pointer outside it hits nothing

    Returns:
        The target, or None when released outside bounds or when there
        are no droppables.
    """
    if bounds is not None and (pointer is None or not bounds.contains(pointer)):
        return None
    if pointer is not None:
        hits = pointer_within(pointer, droppables)
        if hits:
            return hits[0]
    nearest = closest_center(active, droppables)
    return nearest[0] if nearest else None
