"""Task card widget."""

from __future__ import annotations

from rich.color import Color, ColorParseError
from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widget import Widget
from textual.widgets import Static

from ...models import Priority, Task
from ...utils import format_due

PRIORITY_DISPLAY: dict[Priority, tuple[str, str]] = {
    Priority.LOW: ("●", "green"),
    Priority.MEDIUM: ("●", "yellow"),
    Priority.HIGH: ("●", "dark_orange"),
    Priority.CRITICAL: ("▲", "red"),
}


def _label_color(color: str) -> str:
    """Server label colour if rich understands it, else blue."""
    try:
        Color.parse(color)
    except ColorParseError:
        return "blue"
    return color


class TaskCard(Widget, can_focus=True):
    """A task card displayed in a column."""

    def __init__(self, task_data: Task, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._task_data = task_data
        if task_data.is_transient:
            self.add_class("-saving")

    @property
    def task(self) -> Task:  # pyrefly: ignore[bad-override]
        """Get the task for this card."""
        return self._task_data

    def compose(self) -> ComposeResult:
        yield Static(escape(self._truncate(self._task_data.title, 40)), classes="task-title")

        with Horizontal(classes="task-meta"):
            yield Static(self._format_priority(), classes="task-priority")
            due = self._format_due()
            if due:
                yield Static(due, classes="task-due")
            progress = self._format_progress()
            if progress:
                yield Static(progress, classes="task-progress")

        if self._task_data.labels:
            yield Static(self._format_labels(), classes="task-labels")

        if self._task_data.assignees:
            yield Static(self._format_assignees(), classes="task-assignee")
        elif self._task_data.is_transient:
            yield Static("[dim]saving…[/]", classes="task-preview")

    def _format_priority(self) -> str:
        symbol, color = PRIORITY_DISPLAY[self._task_data.priority]
        return f"[{color}]{symbol}[/] {self._task_data.priority.value}"

    def _format_due(self) -> str:
        if self._task_data.due_date is None:
            return ""
        text = format_due(self._task_data.due_date)
        if self._task_data.is_overdue():
            return f"[red]⏰ {text}[/]"
        return f"[dim]⏰ {text}[/]"

    def _format_progress(self) -> str:
        subtasks = self._task_data.subtasks
        if not subtasks:
            return ""
        done = sum(1 for s in subtasks if s.completed)
        color = "green" if done == len(subtasks) else "dim"
        return f"[{color}]☑ {done}/{len(subtasks)}[/]"

    def _format_labels(self) -> str:
        max_labels = 3
        labels = self._task_data.labels[:max_labels]
        formatted = " ".join(f"[{_label_color(label.color)}]#{escape(label.text)}[/]" for label in labels)
        if len(self._task_data.labels) > max_labels:
            formatted += f" [dim]+{len(self._task_data.labels) - max_labels}[/]"
        return formatted

    def _format_assignees(self) -> str:
        first = self._task_data.assignees[0].display_name
        extra = len(self._task_data.assignees) - 1
        return f"@{escape(first)}" + (f" [dim]+{extra}[/]" if extra else "")

    def _truncate(self, text: str, max_len: int) -> str:
        """Truncate text with ellipsis."""
        if len(text) <= max_len:
            return text
        return text[: max_len - 1] + "…"
