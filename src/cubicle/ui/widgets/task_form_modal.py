"""Quick task form: title, priority, due date and description."""

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, Select, Static, TextArea

from ...errors import ValidationError
from ...models import Priority, Task, TaskDraft, validate_task_fields

FIELDS = ("title", "priority", "due_date", "description")


class TaskFormModal(ModalScreen[TaskDraft | None]):
    """Create or edit a task in place.

    Field errors are shown under each input and nothing is returned until
    the form validates. Labels, checklist and assignees of an existing task
    are carried over unchanged; the external editor edits those.
    """

    DEFAULT_CSS = """
    TaskFormModal {
        align: center middle;
    }

    TaskFormModal > Vertical {
        width: 72;
        height: auto;
        max-height: 90%;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    TaskFormModal .form-title {
        text-style: bold;
        margin-bottom: 1;
    }

    TaskFormModal .field-label {
        color: $text-muted;
        margin-top: 1;
    }

    TaskFormModal .field-error {
        color: $error;
        height: auto;
    }

    TaskFormModal TextArea {
        height: 6;
    }

    TaskFormModal .form-hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("ctrl+s", "save", "Save", show=False),
    ]

    def __init__(self, task_data: Task | None = None, column_title: str = "") -> None:
        super().__init__()
        self._task_data = task_data
        self.column_title = column_title

    def compose(self) -> ComposeResult:
        task = self._task_data
        column = escape(self.column_title)
        heading = f"Edit task in {column}" if task else f"New task in {column}"
        due = task.due_date.date().isoformat() if task and task.due_date else ""

        with Vertical():
            yield Label(heading, classes="form-title")
            yield Label("Title", classes="field-label")
            yield Input(value=task.title if task else "", id="title")
            yield Static("", id="title-error", classes="field-error")
            yield Label("Priority", classes="field-label")
            yield Select(
                [(p.value.capitalize(), p.value) for p in Priority],
                value=(task.priority if task else Priority.MEDIUM).value,
                allow_blank=False,
                id="priority",
            )
            yield Static("", id="priority-error", classes="field-error")
            yield Label("Due date (YYYY-MM-DD)", classes="field-label")
            yield Input(value=due, placeholder="optional", id="due_date")
            yield Static("", id="due_date-error", classes="field-error")
            yield Label("Description", classes="field-label")
            yield TextArea(task.description if task else "", id="description")
            yield Static("", id="description-error", classes="field-error")
            yield Static("[Enter] in title or [Ctrl+S] Save  [Esc] Cancel", classes="form-hint")

    def on_mount(self) -> None:
        self.query_one("#title", Input).focus()

    def build_draft(self) -> TaskDraft:
        """Validate the form.

        Raises:
            ValidationError: One message per invalid field.
        """
        fields = {
            "title": self.query_one("#title", Input).value,
            "priority": self.query_one("#priority", Select).value,
            "due_date": self.query_one("#due_date", Input).value,
            "description": self.query_one("#description", TextArea).text,
        }
        if self._task_data is not None:
            existing = TaskDraft.from_task(self._task_data)
            fields.update(
                labels=existing.labels,
                subtasks=existing.subtasks,
                assignee_ids=existing.assignee_ids,
            )
        return validate_task_fields(**fields)

    def show_errors(self, errors: dict[str, str]) -> None:
        for field in FIELDS:
            self.query_one(f"#{field}-error", Static).update(escape(errors.get(field, "")))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_save()

    def action_save(self) -> None:
        try:
            draft = self.build_draft()
        except ValidationError as e:
            self.show_errors(e.errors)
            return
        self.dismiss(draft)

    def action_cancel(self) -> None:
        self.dismiss(None)
