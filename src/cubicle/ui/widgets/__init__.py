"""Widget components."""

from .column import EmptyColumnMessage, KanbanColumn
from .confirm_modal import ConfirmModal
from .ghost import GhostCard
from .prompt_modal import PromptModal
from .task_card import TaskCard
from .task_form_modal import TaskFormModal
from .task_preview_modal import TaskPreviewModal

__all__ = [
    "ConfirmModal",
    "EmptyColumnMessage",
    "GhostCard",
    "KanbanColumn",
    "PromptModal",
    "TaskCard",
    "TaskFormModal",
    "TaskPreviewModal",
]
