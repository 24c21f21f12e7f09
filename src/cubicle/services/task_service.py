"""Editing tasks as markdown documents in the user's editor."""

from __future__ import annotations

import json
import logging
import os
import re
import shlex
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from ..errors import ValidationError
from ..models import Label, Member, Priority, Subtask, Task, TaskDraft, validate_task_fields

logger = logging.getLogger(__name__)

_SUBTASK_RE = re.compile(r"^\[(?P<mark>[ xX])\]\s*(?P<title>.*)$")


class TaskService:
    """Round-trips a task through a front matter document and $EDITOR."""

    def __init__(self, editor: str | None = None) -> None:
        self.editor = editor

    def edit_task(
        self,
        task: Task,
        members: list[Member] | None = None,
        column_title: str | None = None,
    ) -> TaskDraft | None:
        """Open a task in the editor and return the edited fields.

        Returns:
            The validated draft, or None if the editor failed or nothing
            changed.

        Raises:
            ValidationError: The edited document has invalid fields
        """
        members = members or []
        content = format_task_document(task, column_title)

        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".md",
            delete=False,
            prefix=f"cubicle-task-{task.id}-",
        ) as f:
            f.write(content)
            temp_path = Path(f.name)

        try:
            if not self._run_editor(temp_path):
                logger.debug("Editor returned non-zero exit code")
                return None

            edited_content = temp_path.read_text()
            if edited_content == content:
                logger.debug("No changes detected after editing")
                return None

            fields = parse_task_document(edited_content, task, members)
            draft = validate_task_fields(**fields)
            logger.info("Task %s edited", task.id)
            return draft
        finally:
            temp_path.unlink(missing_ok=True)

    def _run_editor(self, filepath: Path) -> bool:
        """Run the user's editor on a file."""
        editor = self.editor or os.environ.get("EDITOR") or os.environ.get("VISUAL")
        if not editor:
            for candidate in ["nvim", "vim", "vi", "nano"]:
                if shutil.which(candidate) is not None:
                    editor = candidate
                    break
            else:
                return False

        # Handle editors with arguments (e.g., "code --wait")
        editor_cmd = [*shlex.split(editor), str(filepath.absolute())]

        try:
            result = subprocess.run(editor_cmd, check=False)
            return result.returncode == 0
        except FileNotFoundError:
            return False


def format_task_document(task: Task, column_title: str | None = None) -> str:
    """Format a task for editing or preview as YAML front matter + body.

    Editable: title, priority, due, labels, assignees, subtasks and the
    description (body). Id and column are written as comments.
    """
    lines = ["---"]
    lines.append(f"title: {_scalar(task.title)}")
    lines.append(f"priority: {task.priority.value:<16}# Valid: {', '.join(Priority.values())}")
    due = task.due_date.date().isoformat() if task.due_date else ""
    lines.append(f"due: {_scalar(due):<21}# YYYY-MM-DD, empty for none")

    if task.labels:
        lines.append("labels:")
        lines.extend(f"  - {_scalar(label.text)}" for label in task.labels)
    else:
        lines.append("labels: []")

    if task.assignees:
        lines.append("assignees:")
        lines.extend(f"  - {_scalar(m.email or m.id)}" for m in task.assignees)
    else:
        lines.append("assignees: []")

    if task.subtasks:
        lines.append("subtasks:")
        for subtask in task.subtasks:
            mark = "x" if subtask.completed else " "
            lines.append(f"  - {_scalar(f'[{mark}] {subtask.title}')}")
    else:
        lines.append("subtasks: []")

    lines.append("")
    lines.append("# Read-only fields (changes will be ignored):")
    if not task.is_transient:
        lines.append(f"# id: {task.id}")
    lines.append(f"# column: {column_title or task.column_id}")
    lines.append("---")
    lines.append("")
    lines.append(task.description or "")
    return "\n".join(lines)


def parse_task_document(
    content: str, original: Task, members: list[Member] | None = None
) -> dict[str, Any]:
    """Parse an edited task document into TaskDraft fields.

    Existing label colors and subtask ids are kept when the text matches.

    Raises:
        ValidationError: Malformed YAML or unknown assignees
    """
    try:
        post = frontmatter.loads(content)
    except yaml.YAMLError as e:
        raise ValidationError({"document": f"Invalid front matter: {e}"}) from e

    meta = post.metadata
    errors: dict[str, str] = {}

    labels_by_text = {label.text: label for label in original.labels}
    labels = []
    for text in _as_list(meta.get("labels")):
        existing = labels_by_text.get(text)
        labels.append(existing.model_copy() if existing else Label(text=text))

    subtasks_by_title = {s.title: s for s in original.subtasks}
    subtasks = []
    for entry in _as_list(meta.get("subtasks")):
        match = _SUBTASK_RE.match(entry)
        title = match.group("title").strip() if match else entry
        completed = bool(match and match.group("mark").lower() == "x")
        existing = subtasks_by_title.get(title)
        subtasks.append(
            Subtask(id=existing.id if existing else None, title=title, completed=completed)
        )

    lookup: dict[str, str] = {}
    for member in [*(members or []), *original.assignees]:
        for key in (member.id, member.email, member.name):
            if key:
                lookup[key.lower()] = member.id
    assignee_ids = []
    for entry in _as_list(meta.get("assignees")):
        member_id = lookup.get(entry.lower())
        if member_id is None:
            errors["assignees"] = f"Unknown board member: {entry}"
        elif member_id not in assignee_ids:
            assignee_ids.append(member_id)

    if errors:
        raise ValidationError(errors)

    due = meta.get("due")
    return {
        "title": str(meta.get("title") or ""),
        "description": post.content,
        "priority": meta.get("priority") or Priority.MEDIUM.value,
        "due_date": due.isoformat() if hasattr(due, "isoformat") else due,
        "labels": labels,
        "subtasks": subtasks,
        "assignee_ids": assignee_ids,
    }


def _scalar(value: str) -> str:
    """Quote a string as a YAML scalar (JSON strings are valid YAML)."""
    return json.dumps(value, ensure_ascii=False)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [str(value).strip()] if str(value).strip() else []
