"""cubicle - terminal Kanban client for the Cubicle freelancer API."""

__version__ = "0.1.0"
