"""Task preview modal with syntax-highlighted front matter."""

from collections.abc import Callable

from rich.markup import escape
from rich.syntax import Syntax as RichSyntax
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from ...models import Task
from ...services import format_task_document


class TaskPreviewModal(ModalScreen[bool]):
    """Read-only view of a task as the editor would show it.

    Number keys 1-9 toggle checklist items. Returns True if the user wants
    to edit in the external editor, False otherwise.
    """

    DEFAULT_CSS = """
    TaskPreviewModal {
        align: center middle;
    }

    TaskPreviewModal > VerticalScroll {
        width: 100%;
        height: 100%;
        border: solid $primary;
        background: $surface;
        margin: 1 2;
    }

    TaskPreviewModal #title-bar {
        height: 1;
        width: 100%;
        background: $primary-darken-2;
        color: $text;
        text-align: center;
    }

    TaskPreviewModal #content {
        width: 100%;
        height: auto;
        padding: 0 1;
    }

    TaskPreviewModal #footer-bar {
        height: 1;
        width: 100%;
        background: $surface-lighten-1;
        color: $text-muted;
        text-align: center;
        dock: bottom;
    }
    """

    BINDINGS = [
        Binding("e", "edit_external", "Edit", show=False),
    ]

    SCROLL_KEYS = {"up", "down", "pageup", "pagedown", "home", "end"}

    def __init__(
        self,
        task_data: Task,
        column_title: str | None = None,
        on_toggle: Callable[[int], None] | None = None,
    ) -> None:
        super().__init__()
        self._task_data = task_data.model_copy(deep=True)
        self._column_title = column_title
        self._on_toggle = on_toggle

    def compose(self) -> ComposeResult:
        footer = escape("[e] Edit  [any key] Close")
        if self._task_data.subtasks and self._on_toggle is not None:
            footer = escape("[1-9] Toggle item  ") + footer
        with VerticalScroll():
            yield Static(escape(self._task_data.title), id="title-bar")
            yield Static(self._render_document(), id="content")
            yield Static(footer, id="footer-bar")

    def _render_document(self) -> RichSyntax:
        return RichSyntax(
            format_task_document(self._task_data, self._column_title),
            "markdown",
            theme="github-dark",
            line_numbers=True,
            word_wrap=True,
        )

    def on_key(self, event) -> None:
        """Scroll keys scroll, digits toggle checklist items, others dismiss."""
        if event.key in self.SCROLL_KEYS or event.key == "e":
            return
        event.stop()
        if event.key.isdigit() and self._on_toggle is not None:
            self._toggle(int(event.key) - 1)
            return
        self.dismiss(False)

    def _toggle(self, index: int) -> None:
        if not 0 <= index < len(self._task_data.subtasks):
            return
        subtask = self._task_data.subtasks[index]
        subtask.completed = not subtask.completed
        self.query_one("#content", Static).update(self._render_document())
        if self._on_toggle is not None:
            self._on_toggle(index)

    def action_edit_external(self) -> None:
        self.dismiss(True)
