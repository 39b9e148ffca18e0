"""Task repository: validated operations over a task store.

Each public method validates its input with the matching pydantic model,
checks existence before any mutation, performs one store operation, and logs
failures before re-raising them unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import NotFoundError, StorageError, TaskError, ValidationError
from .models import (
    CreateTaskInput,
    DeleteTaskInput,
    DeleteTaskResult,
    GetTaskInput,
    ListTasksInput,
    Task,
    UpdateTaskInput,
    UpdateTaskStatusInput,
)
from .storage import TaskStorage

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Payload = BaseModel | Mapping[str, Any]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class TaskRepository:
    """Create, list, update, update-status and delete tasks."""

    def __init__(self, storage: TaskStorage, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.storage = storage
        self._clock = clock

    def create_task(self, payload: CreateTaskInput | Mapping[str, Any]) -> Task:
        """Insert a new pending task; both timestamps are set to now."""
        with _log_failure("create"):
            data = _validate(CreateTaskInput, payload, operation="create")
            now = self._clock()
            task = self.storage.insert_task(
                title=data.title,
                description=data.description,
                status="pending",
                created_at=now,
                updated_at=now,
            )
        logger.info("task_create event=created task_id=%s", task.id)
        return task

    def list_tasks(self, payload: ListTasksInput | Mapping[str, Any] | None = None) -> list[Task]:
        """Return tasks newest-first, optionally filtered by status."""
        with _log_failure("list"):
            data = _validate(ListTasksInput, payload or {}, operation="list")
            tasks = self.storage.list_tasks(status=data.status)
        logger.debug("task_list event=listed status=%s count=%s", data.status, len(tasks))
        return tasks

    def get_task(self, payload: GetTaskInput | Mapping[str, Any]) -> Task:
        with _log_failure("get"):
            data = _validate(GetTaskInput, payload, operation="get")
            task = self.storage.get_task(data.id)
            if task is None:
                raise NotFoundError(data.id)
        return task

    def update_task(self, payload: UpdateTaskInput | Mapping[str, Any]) -> Task:
        """Apply a partial update: only supplied fields change.

        `description: None` clears the description; an omitted description
        keeps its stored value. updated_at is refreshed even when nothing
        else is supplied.
        """
        with _log_failure("update"):
            data = _validate(UpdateTaskInput, payload, operation="update")
            changes = data.changes()
            task = self._apply_changes(data.id, changes)
        logger.info("task_update event=updated task_id=%s fields=%s", task.id, sorted(changes))
        return task

    def update_task_status(self, payload: UpdateTaskStatusInput | Mapping[str, Any]) -> Task:
        """Set only the status (and updated_at) of an existing task."""
        with _log_failure("update_status"):
            data = _validate(UpdateTaskStatusInput, payload, operation="update_status")
            task = self._apply_changes(data.id, {"status": data.status})
        logger.info("task_update_status event=updated task_id=%s status=%s", task.id, task.status)
        return task

    def delete_task(self, payload: DeleteTaskInput | Mapping[str, Any]) -> DeleteTaskResult:
        """Remove an existing task permanently."""
        with _log_failure("delete"):
            data = _validate(DeleteTaskInput, payload, operation="delete")
            if self.storage.get_task(data.id) is None:
                raise NotFoundError(data.id)
            if not self.storage.delete_task(data.id):
                # Removed by a concurrent caller between the check and the delete.
                raise NotFoundError(data.id)
        logger.info("task_delete event=deleted task_id=%s", data.id)
        return DeleteTaskResult(success=True, id=data.id)

    def _apply_changes(self, task_id: int, changes: Mapping[str, Any]) -> Task:
        current = self.storage.get_task(task_id)
        if current is None:
            raise NotFoundError(task_id)
        # created_at <= updated_at holds even if the wall clock steps backwards.
        updated_at = max(self._clock(), current.created_at)
        updated = self.storage.update_task(task_id, changes, updated_at=updated_at)
        if updated is None:
            raise NotFoundError(task_id)
        return updated


def _validate(model: type[ModelT], payload: Payload, *, operation: str) -> ModelT:
    """Return payload as a validated `model`, translating pydantic errors."""
    if isinstance(payload, BaseModel):
        # Instances may have been mutated after construction, so they are
        # re-validated too. Only set keys are kept so absent fields stay absent.
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(
            operation,
            exc.errors(include_url=False, include_context=False),
        ) from exc


@contextmanager
def _log_failure(operation: str) -> Iterator[None]:
    """Log a failed operation with its reason, then re-raise it unchanged."""
    try:
        yield
    except StorageError:
        logger.exception("task_%s event=failed reason=storage_error", operation)
        raise
    except TaskError as exc:
        logger.warning(
            "task_%s event=failed reason=%s detail=%s",
            operation,
            type(exc).__name__,
            exc,
        )
        raise
