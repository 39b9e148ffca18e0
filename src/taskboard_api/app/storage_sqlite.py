"""SQLite storage backend for local runs and tests.

Timestamps are stored as UTC ISO-8601 text with fixed microsecond precision,
so text ordering matches time ordering.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .errors import StorageError
from .models import Task, TaskStatus
from .storage import build_set_clause, list_order_clause, row_to_task

MEMORY_PATH = ":memory:"


class SqliteTaskStorage:
    """Thread-safe SQLite-backed storage holding one connection for its lifetime."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        if self.db_path != MEMORY_PATH:
            self.db_path = str(Path(self.db_path).expanduser())
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            # FastAPI runs sync routes in a worker pool; the lock serializes access.
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open SQLite database {self.db_path}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row

    def migrate(self) -> None:
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL CHECK (length(title) BETWEEN 1 AND 200),
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'completed')),
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
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
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO tasks (title, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    status,
                    _format_timestamp(created_at),
                    _format_timestamp(updated_at),
                ),
            )
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (cursor.lastrowid,)).fetchone()
        if row is None:
            raise StorageError("Inserted task could not be read back")
        return row_to_task(row)

    def get_task(self, task_id: int) -> Task | None:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if row is None:
            return None
        return row_to_task(row)

    def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        with self._transaction() as conn:
            if status is None:
                rows = conn.execute(f"SELECT * FROM tasks {list_order_clause()}").fetchall()
            else:
                rows = conn.execute(
                    f"SELECT * FROM tasks WHERE status = ? {list_order_clause()}",
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
        set_clause, params = build_set_clause(
            changes,
            updated_at=_format_timestamp(updated_at),
            placeholder="?",
        )
        with self._transaction() as conn:
            cursor = conn.execute(
                f"UPDATE tasks SET {set_clause} WHERE id = ?",
                (*params, task_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return row_to_task(row)

    def delete_task(self, task_id: int) -> bool:
        with self._transaction() as conn:
            deleted = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,)).rowcount
        return deleted > 0

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run one locked unit of work; commit on success, roll back on error."""
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                raise StorageError(f"SQLite operation failed: {exc}") from exc


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).isoformat(timespec="microseconds")
