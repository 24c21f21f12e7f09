"""Drag ghost drawn under the pointer."""

from rich.markup import escape
from textual.widgets import Static

from ...dnd import Rect
from ...models import Task


class GhostCard(Static):
    """Floating copy of the task card being dragged.

    Lives on the overlay layer with absolute positioning so it never
    disturbs the column layout.
    """

    DEFAULT_CSS = """
    GhostCard {
        position: absolute;
        layer: overlay;
        display: none;
        height: 3;
        padding: 0 1;
        background: $primary 40%;
        border: round $accent;
        color: $text;
    }
    """

    def show_at(self, task: Task | None, rect: Rect) -> None:
        if task is not None:
            self.update(escape(task.title))
        self.styles.width = max(int(rect.width), 10)
        self.styles.offset = (int(rect.x), int(rect.y))
        self.display = True

    def hide(self) -> None:
        self.display = False
