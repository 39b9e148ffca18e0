"""PostgreSQL storage backend for tasks.

Terms used in this file:
- Migration: creating the table and indexes before normal reads/writes.
- Partial update: an UPDATE whose SET clause names only supplied columns.
- Row factory: returns query rows as dict-like objects instead of tuples.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Protocol

from .errors import StorageError
from .models import UPDATABLE_FIELDS, Task, TaskStatus


class TaskStorage(Protocol):
    """Operations every task store backend provides."""

    def migrate(self) -> None: ...

    def insert_task(
        self,
        *,
        title: str,
        description: str | None,
        status: TaskStatus,
        created_at: datetime,
        updated_at: datetime,
    ) -> Task: ...

    def get_task(self, task_id: int) -> Task | None: ...

    def list_tasks(self, status: TaskStatus | None = None) -> list[Task]: ...

    def update_task(
        self,
        task_id: int,
        changes: Mapping[str, Any],
        *,
        updated_at: datetime,
    ) -> Task | None: ...

    def delete_task(self, task_id: int) -> bool: ...

    def close(self) -> None: ...


def build_set_clause(
    changes: Mapping[str, Any],
    *,
    updated_at: datetime | str,
    placeholder: str,
) -> tuple[str, list[Any]]:
    """Build `col = ?, ..., updated_at = ?` for the supplied columns only.

    Column names come from a fixed allow-list; values are always bound as
    parameters.
    """
    unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValueError(f"Cannot update column(s): {', '.join(unknown)}")

    columns = [name for name in UPDATABLE_FIELDS if name in changes]
    assignments = [f"{name} = {placeholder}" for name in columns]
    assignments.append(f"updated_at = {placeholder}")
    params = [changes[name] for name in columns]
    params.append(updated_at)
    return ", ".join(assignments), params


def list_order_clause() -> str:
    # Newest first; identical created_at values fall back to insertion order (id).
    return "ORDER BY created_at DESC, id DESC"


class PostgresTaskStorage:
    """Thread-safe PostgreSQL-backed storage for Task records."""

    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise ValueError("database_url is required")
        self.database_url = database_url
        # Lock guards DB operations done through this storage instance.
        self._lock = threading.Lock()
        # Lazy import helper keeps error message clear if psycopg is missing.
        self._psycopg, self._dict_row = self._load_psycopg()

    def migrate(self) -> None:
        """Create required table and indexes if they do not already exist."""
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id BIGSERIAL PRIMARY KEY,
                    title VARCHAR(200) NOT NULL CHECK (char_length(title) >= 1),
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'completed')),
                    created_at TIMESTAMPTZ NOT NULL,
                    updated_at TIMESTAMPTZ NOT NULL,
                    CHECK (created_at <= updated_at)
                )
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tasks_status
                ON tasks(status)
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_tasks_created_at
                ON tasks(created_at DESC, id DESC)
                """)

    def insert_task(
        self,
        *,
        title: str,
        description: str | None,
        status: TaskStatus,
        created_at: datetime,
        updated_at: datetime,
    ) -> Task:
        """Insert one row and return it with its store-assigned id."""
        with self._transaction() as conn:
            row = conn.execute(
                """
                INSERT INTO tasks (title, description, status, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
                """,
                (title, description, status, created_at, updated_at),
            ).fetchone()
        if row is None:
            raise StorageError("Insert did not return the created task")
        return row_to_task(row)

    def get_task(self, task_id: int) -> Task | None:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = %s", (task_id,)).fetchone()
        if row is None:
            return None
        return row_to_task(row)

    def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        with self._transaction() as conn:
            if status is None:
                rows = conn.execute(f"SELECT * FROM tasks {list_order_clause()}").fetchall()
            else:
                rows = conn.execute(
                    f"SELECT * FROM tasks WHERE status = %s {list_order_clause()}",
                    (status,),
                ).fetchall()
        return [row_to_task(row) for row in rows]

    def update_task(
        self,
        task_id: int,
        changes: Mapping[str, Any],
        *,
        updated_at: datetime,
    ) -> Task | None:
        """Update the supplied columns plus updated_at; None when the row is gone."""
        set_clause, params = build_set_clause(changes, updated_at=updated_at, placeholder="%s")
        with self._transaction() as conn:
            row = conn.execute(
                f"UPDATE tasks SET {set_clause} WHERE id = %s RETURNING *",
                (*params, task_id),
            ).fetchone()
        if row is None:
            return None
        return row_to_task(row)

    def delete_task(self, task_id: int) -> bool:
        with self._transaction() as conn:
            deleted = conn.execute("DELETE FROM tasks WHERE id = %s", (task_id,)).rowcount
        return deleted > 0

    def close(self) -> None:
        # Connections are opened per operation; nothing is held open.
        return None

    @contextmanager
    def _transaction(self) -> Iterator[Any]:
        """Run one locked unit of work and translate driver failures."""
        try:
            with self._lock, self._connect() as conn:
                yield conn
                conn.commit()
        except self._psycopg.Error as exc:
            raise StorageError(f"PostgreSQL operation failed: {exc}") from exc

    def _connect(self) -> Any:
        """Open a psycopg connection that yields dict-like rows."""
        return self._psycopg.connect(self.database_url, row_factory=self._dict_row)

    @staticmethod
    def _load_psycopg() -> tuple[Any, Any]:
        """Import psycopg and helpers with a friendly install hint on failure."""
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError as exc:  # pragma: no cover - exercised only without dependency
            raise RuntimeError(
                "PostgreSQL backend requires psycopg. Install with: "
                'python -m pip install "psycopg[binary]>=3.2,<4.0"'
            ) from exc
        return psycopg, dict_row


def _parse_datetime(raw: Any) -> datetime:
    """Parse datetime value from database driver output."""
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        return datetime.fromisoformat(raw)
    raise TypeError(f"Unsupported datetime value: {type(raw)!r}")


def row_to_task(row: Mapping[str, Any]) -> Task:
    """Map one DB row to the canonical Task Pydantic model."""
    return Task(
        id=int(row["id"]),
        title=row["title"],
        description=row["description"],
        status=row["status"],
        created_at=_parse_datetime(row["created_at"]),
        updated_at=_parse_datetime(row["updated_at"]),
    )
