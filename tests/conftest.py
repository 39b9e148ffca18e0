from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from taskboard_api.app.repository import TaskRepository
from taskboard_api.app.settings import Settings
from taskboard_api.app.storage_sqlite import SqliteTaskStorage


class TickingClock:
    """Test clock that moves forward by `step` on every call."""

    def __init__(
        self,
        start: datetime = datetime(2026, 1, 1, 9, 0, tzinfo=UTC),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def storage() -> Iterator[SqliteTaskStorage]:
    task_storage = SqliteTaskStorage(":memory:")
    task_storage.migrate()
    yield task_storage
    task_storage.close()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def frozen_clock() -> TickingClock:
    """Clock that never moves, for tasks sharing one created_at."""
    return TickingClock(step=timedelta(0))


@pytest.fixture
def repository(storage: SqliteTaskStorage, clock: TickingClock) -> TaskRepository:
    return TaskRepository(storage, clock=clock)


@pytest.fixture
def client(storage: SqliteTaskStorage) -> Iterator[TestClient]:
    from taskboard_api.main import create_app

    app = create_app(
        storage=storage,
        settings_override=Settings(database_url="", _env_file=None),
    )
    with TestClient(app) as test_client:
        yield test_client
