"""Pydantic models shared across API, repository, and storage.

Terms used in this file:
- Input model: validates one operation's request before any store access.
- model_fields_set: the keys a caller actually supplied. A key that was left
  out is absent; a key supplied as null is present. Partial updates rely on
  this to tell "keep the stored value" apart from "clear the stored value".
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

# Two-valued lifecycle flag; transitions are unrestricted in both directions.
TaskStatus = Literal["pending", "completed"]

TITLE_MAX_LENGTH = 200

# Columns a partial update may touch, in SET-clause order.
UPDATABLE_FIELDS = ("title", "description", "status")


class Task(BaseModel):
    """Canonical task record shape returned by API/repository/storage."""

    id: int
    title: str
    description: str | None = None
    status: TaskStatus = "pending"
    created_at: datetime
    updated_at: datetime


class CreateTaskInput(BaseModel):
    """Input for the create operation and body of POST /tasks."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    # Required key, but the value may be null.
    description: str | None


class ListTasksInput(BaseModel):
    """Optional status filter for the list operation."""

    status: TaskStatus | None = None


class TaskChanges(BaseModel):
    """Fields of a partial update; body of PATCH /tasks/{id}."""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus | None = None

    @model_validator(mode="after")
    def _reject_null_for_required_columns(self) -> TaskChanges:
        # title and status can be left out, but never cleared.
        for name in ("title", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may be omitted but must not be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller supplied, nulls included."""
        return {
            name: getattr(self, name) for name in UPDATABLE_FIELDS if name in self.model_fields_set
        }


class UpdateTaskInput(TaskChanges):
    """Input for the partial update operation."""

    id: int


class TaskStatusChange(BaseModel):
    """Body of PATCH /tasks/{id}/status."""

    status: TaskStatus


class UpdateTaskStatusInput(TaskStatusChange):
    """Input for the status-only update operation."""

    id: int


class GetTaskInput(BaseModel):
    id: int


class DeleteTaskInput(BaseModel):
    id: int


class DeleteTaskResult(BaseModel):
    """Confirmation returned by the delete operation."""

    success: bool
    id: int
