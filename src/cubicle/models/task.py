"""Task domain model."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..utils import from_iso, now_utc
from .enums import Priority

# Prefix for ids assigned locally before the server confirms a create
TRANSIENT_PREFIX = "tmp-"


class Member(BaseModel):
    """A board member, used for task assignment."""

    id: str
    name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id

    @classmethod
    def from_api(cls, data: dict[str, Any] | str) -> Member:
        """Create from a populated user object or a bare user id."""
        if isinstance(data, str):
            return cls(id=data)
        return cls(
            id=str(data.get("_id") or data.get("id", "")),
            name=data.get("name") or "",
            email=data.get("email") or "",
        )


class Label(BaseModel):
    """A colored label attached to a task."""

    id: str | None = None
    text: str
    color: str = "blue"

    def to_api(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text, "color": self.color}
        if self.id:
            data["id"] = self.id
        return data


class Subtask(BaseModel):
    """A checklist item on a task."""

    id: str | None = None
    title: str
    completed: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Subtask:
        return cls(
            id=data.get("_id") or data.get("id"),
            title=data.get("title", ""),
            completed=bool(data.get("isCompleted", data.get("completed", False))),
        )

    def to_api(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title, "isCompleted": self.completed}
        if self.id:
            data["_id"] = self.id
        return data


class Task(BaseModel):
    """A unit of work belonging to exactly one column."""

    id: str  # server-assigned, or "tmp-..." while a create is in flight
    title: str
    column_id: str
    board_id: str | None = None
    description: str = ""
    due_date: datetime | None = None
    priority: Priority = Priority.MEDIUM
    labels: list[Label] = Field(default_factory=list)
    subtasks: list[Subtask] = Field(default_factory=list)
    assignees: list[Member] = Field(default_factory=list)
    position: int = 0
    created: datetime | None = None
    updated: datetime | None = None

    @property
    def is_transient(self) -> bool:
        """True while the task only exists locally."""
        return self.id.startswith(TRANSIENT_PREFIX)

    @property
    def completion(self) -> int:
        """Percentage of completed subtasks, rounded. 0 without subtasks."""
        if not self.subtasks:
            return 0
        done = sum(1 for s in self.subtasks if s.completed)
        return round(done / len(self.subtasks) * 100)

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Whether the due date has passed."""
        if self.due_date is None:
            return False
        now = now or now_utc()
        due = self.due_date
        if due.tzinfo is None:
            now = now.replace(tzinfo=None)
        return now > due

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Task:
        """Create a Task from a server task document."""
        return cls(
            id=str(data.get("_id") or data["id"]),
            title=data.get("title", ""),
            column_id=str(data.get("columnId", "")),
            board_id=data.get("boardId"),
            description=data.get("description") or "",
            due_date=_parse_datetime(data.get("dueDate")),
            priority=_parse_priority(data.get("priority")),
            labels=[Label(**label) for label in data.get("labels") or []],
            subtasks=[Subtask.from_api(s) for s in data.get("subtasks") or []],
            assignees=[Member.from_api(m) for m in data.get("assignedTo") or []],
            position=int(data.get("position") or 0),
            created=_parse_datetime(data.get("createdAt")),
            updated=_parse_datetime(data.get("updatedAt")),
        )


class TaskDraft(BaseModel):
    """User-editable task fields, validated before any request is sent."""

    title: str
    description: str = ""
    due_date: datetime | None = None
    priority: Priority = Priority.MEDIUM
    labels: list[Label] = Field(default_factory=list)
    subtasks: list[Subtask] = Field(default_factory=list)
    assignee_ids: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Any) -> Any:
        if v is None or isinstance(v, datetime):
            return v
        if isinstance(v, date):
            return datetime(v.year, v.month, v.day)
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            try:
                return from_iso(v)
            except ValueError as err:
                raise ValueError("Due date must be an ISO date (YYYY-MM-DD)") from err
        return v

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        return cls(
            title=task.title,
            description=task.description,
            due_date=task.due_date,
            priority=task.priority,
            labels=[label.model_copy() for label in task.labels],
            subtasks=[s.model_copy() for s in task.subtasks],
            assignee_ids=[m.id for m in task.assignees],
        )

    def to_api(self) -> dict[str, Any]:
        """Request body for task create/update."""
        data: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "assignedTo": list(self.assignee_ids),
            "labels": [label.to_api() for label in self.labels],
            "subtasks": [s.to_api() for s in self.subtasks],
        }
        if self.due_date is not None:
            data["dueDate"] = self.due_date.isoformat()
        return data


def validate_task_fields(**fields: Any) -> TaskDraft:
    """Build a TaskDraft, converting pydantic errors to per-field messages.

    Raises:
        ValidationError: One message per invalid field.
    """
    try:
        return TaskDraft(**fields)
    except PydanticValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "form"
            message = err["msg"].removeprefix("Value error, ")
            errors.setdefault(field, message)
        raise ValidationError(errors) from e


def _parse_priority(value: str | None) -> Priority:
    """Parse priority, falling back to medium for unknown values."""
    try:
        return Priority(value or Priority.MEDIUM.value)
    except ValueError:
        return Priority.MEDIUM


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse datetime from string or pass through."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return from_iso(value)
