"""Error taxonomy raised by the task repository and storage backends."""

from __future__ import annotations

from typing import Any


class TaskError(Exception):
    """Base class for every error the task core raises."""


class ValidationError(TaskError):
    """Input violates shape or bounds; raised before any store access."""

    def __init__(self, operation: str, errors: list[dict[str, Any]]) -> None:
        self.operation = operation
        self.errors = errors
        super().__init__(f"Invalid input for {operation}: {len(errors)} error(s)")


class NotFoundError(TaskError):
    """The operation targets an id that does not exist."""

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class StorageError(TaskError):
    """The underlying persistence operation failed."""
