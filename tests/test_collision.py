"""Tests for drop target collision detection."""

import pytest

from cubicle.dnd import Droppable, DroppableKind, Rect, closest_center, detect_collision, pointer_within

COLUMN_A = Droppable("A", DroppableKind.COLUMN, "A", Rect(0, 0, 30, 40))
COLUMN_B = Droppable("B", DroppableKind.COLUMN, "B", Rect(32, 0, 30, 40))
TASK_1 = Droppable("t1", DroppableKind.TASK, "A", Rect(1, 1, 28, 5))
TASK_2 = Droppable("t2", DroppableKind.TASK, "A", Rect(1, 7, 28, 5))
BOARD = Rect(0, 0, 62, 40)

ALL = [COLUMN_A, COLUMN_B, TASK_1, TASK_2]


class TestRect:
    """Tests for rectangle geometry."""

    def test_edges_and_center(self):
        rect = Rect(2, 4, 10, 6)
        assert rect.right == 12
        assert rect.bottom == 10
        assert rect.center == (7, 7)

    def test_contains_is_inclusive(self):
        rect = Rect(0, 0, 10, 10)
        assert rect.contains((0, 0))
        assert rect.contains((10, 10))
        assert not rect.contains((10.5, 5))

    def test_translate(self):
        assert Rect(1, 1, 4, 2).translate(3, -1) == Rect(4, 0, 4, 2)


class TestPointerWithin:
    """Tests for the pointer-within tier."""

    def test_card_ranks_above_its_column(self):
        """A card under the pointer beats the larger column around it."""
        hits = pointer_within((10, 3), ALL)
        assert hits == [TASK_1, COLUMN_A]

    def test_nothing_under_pointer(self):
        assert pointer_within((31, 10), ALL) == []

    def test_empty_column(self):
        assert pointer_within((40, 30), ALL) == [COLUMN_B]


class TestClosestCenter:
    """Tests for the closest-center tier."""

    def test_orders_by_center_distance(self):
        ghost = Rect(20, 8, 28, 5)  # center (34, 10.5)
        assert closest_center(ghost, ALL)[0] == COLUMN_B

    def test_empty(self):
        assert closest_center(Rect(0, 0, 1, 1), []) == []


class TestDetectCollision:
    """Tests for the combined detection."""

    def test_pointer_within_wins(self):
        ghost = Rect(40, 30, 28, 5)  # closest center would be B
        assert detect_collision((10, 9), ghost, ALL, BOARD) == TASK_2

    def test_falls_back_to_closest_center(self):
        """Pointer in the gap between columns uses the ghost center."""
        ghost = Rect(20, 8, 28, 5)
        assert detect_collision((31, 10), ghost, ALL, BOARD) == COLUMN_B

    @pytest.mark.parametrize("pointer", [(70, 10), (-1, 5), (30, 41)])
    def test_outside_bounds_hits_nothing(self, pointer):
        """Released outside the board: no target."""
        assert detect_collision(pointer, Rect(60, 5, 28, 5), ALL, BOARD) is None

    def test_no_droppables(self):
        assert detect_collision((5, 5), Rect(0, 0, 4, 2), [], BOARD) is None

    def test_without_bounds_always_finds_nearest(self):
        assert detect_collision((500, 500), Rect(490, 490, 20, 20), ALL) == COLUMN_B
