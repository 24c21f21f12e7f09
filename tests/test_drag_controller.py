"""Tests for the drag gesture state machine."""

from cubicle.dnd import ACTIVATION_DISTANCE, DragController, DragPhase, Droppable, DroppableKind, Rect

COLUMN_A = Droppable("A", DroppableKind.COLUMN, "A", Rect(0, 0, 30, 40))
COLUMN_B = Droppable("B", DroppableKind.COLUMN, "B", Rect(32, 0, 30, 40))
TASK_1 = Droppable("t1", DroppableKind.TASK, "A", Rect(1, 1, 28, 5))
BOARD = Rect(0, 0, 62, 40)
TARGETS = [COLUMN_A, COLUMN_B, TASK_1]


def start_drag(controller: DragController) -> None:
    controller.press("t1", (10, 3), TASK_1.rect)
    controller.move((10 + ACTIVATION_DISTANCE, 3))


class TestActivation:
    """Tests for the press -> drag transition."""

    def test_press_enters_pending(self):
        controller = DragController()
        controller.press("t1", (10, 3), TASK_1.rect)
        assert controller.phase == DragPhase.PENDING
        assert controller.task_id == "t1"
        assert controller.ghost_rect is None

    def test_small_movement_stays_pending(self):
        """Jitter under the activation distance is not a drag."""
        controller = DragController()
        controller.press("t1", (10, 3), TASK_1.rect)
        assert controller.move((12, 4)) is None
        assert controller.phase == DragPhase.PENDING

    def test_activation_distance_starts_drag(self):
        controller = DragController()
        start_drag(controller)
        assert controller.is_dragging

    def test_ghost_follows_pointer(self):
        """The ghost keeps the card's offset from the pointer."""
        controller = DragController()
        controller.press("t1", (10, 3), TASK_1.rect)
        ghost = controller.move((16, 5))
        assert ghost == Rect(7, 3, 28, 5)

    def test_press_during_gesture_is_ignored(self):
        controller = DragController()
        start_drag(controller)
        controller.press("t2", (40, 10), Rect(33, 8, 28, 5))
        assert controller.task_id == "t1"

    def test_move_while_idle(self):
        assert DragController().move((3, 3)) is None


class TestRelease:
    """Tests for finishing a gesture."""

    def test_click_returns_none(self):
        """Press and release without dragging is a click."""
        controller = DragController()
        controller.press("t1", (10, 3), TASK_1.rect)
        assert controller.release((10, 3), TARGETS, BOARD) is None
        assert controller.phase == DragPhase.IDLE

    def test_release_while_idle(self):
        assert DragController().release((10, 3), TARGETS, BOARD) is None

    def test_valid_drop(self):
        controller = DragController()
        start_drag(controller)

        result = controller.release((45, 20), TARGETS, BOARD)

        assert result is not None
        assert result.valid
        assert result.phase == DragPhase.DROPPED_VALID
        assert result.target == COLUMN_B
        assert controller.phase == DragPhase.IDLE
        assert controller.task_id is None

    def test_drop_on_itself_is_invalid(self):
        controller = DragController()
        start_drag(controller)

        result = controller.release((20, 3), TARGETS, BOARD)

        assert result.phase == DragPhase.DROPPED_INVALID
        assert result.target == TASK_1
        assert not result.valid

    def test_drop_outside_board_is_invalid(self):
        controller = DragController()
        start_drag(controller)

        result = controller.release((100, 20), TARGETS, BOARD)

        assert result.phase == DragPhase.DROPPED_INVALID
        assert result.target is None
        assert controller.phase == DragPhase.IDLE

    def test_cancel_resets(self):
        controller = DragController()
        start_drag(controller)
        controller.cancel()
        assert controller.phase == DragPhase.IDLE
        assert controller.release((45, 20), TARGETS, BOARD) is None

    def test_drag_without_source_rect(self):
        """Without a card rectangle there is no ghost; the pointer alone picks the target."""
        controller = DragController()
        controller.press("t1", (10, 3))

        assert controller.move((10 + ACTIVATION_DISTANCE, 3)) is None
        assert controller.is_dragging

        result = controller.release((45, 20), TARGETS, BOARD)

        assert result is not None
        assert result.valid
        assert result.target == COLUMN_B
