"""FastAPI application wiring for the task board service.

Terms used in this file:
- FastAPI app: the main web application object.
- Route/path operation: a function exposed over HTTP (for example, GET /tasks).
- response_model: Pydantic model used to validate/shape API responses.
- app.state: holds the TaskRepository built once at start-up and shared by routes.
- Lifespan: start-up/shut-down hook where storage is opened, migrated and closed.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse

from .app.errors import NotFoundError, StorageError, ValidationError
from .app.logging_setup import setup_logging
from .app.models import (
    CreateTaskInput,
    DeleteTaskResult,
    Task,
    TaskChanges,
    TaskStatus,
    TaskStatusChange,
)
from .app.repository import TaskRepository
from .app.settings import Settings, get_settings
from .app.storage import PostgresTaskStorage, TaskStorage
from .app.storage_sqlite import SqliteTaskStorage
from .app.ui import render_homepage

logger = logging.getLogger(__name__)

POSTGRES_SCHEMES = ("postgresql://", "postgres://")
SQLITE_PREFIX = "sqlite:///"


def create_app(
    *,
    storage: TaskStorage | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    """Application factory.

    Pass `storage` to reuse an already-built backend (tests do this); without
    it the backend is chosen from TASKBOARD_DATABASE_URL during start-up.
    """
    settings = settings_override or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        _ensure_runtime_state(app, settings=settings, storage_override=storage)
        yield
        # Injected storage belongs to the caller; only close what was opened here.
        if storage is None:
            app.state.repository.storage.close()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    # Keep test paths reliable when lifespan is not executed by the client.
    if storage is not None:
        _ensure_runtime_state(app, settings=settings, storage_override=storage)

    def _get_repository(request: Request) -> TaskRepository:
        if not hasattr(request.app.state, "repository"):
            _ensure_runtime_state(request.app, settings=settings, storage_override=storage)
        return request.app.state.repository

    @app.exception_handler(ValidationError)
    async def handle_validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors)})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def handle_storage_error(_: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": "Task storage unavailable"})

    # Multiple health endpoints map to the same function for compatibility with
    # different probes/load balancers.
    @app.get("/health")
    @app.get("/healthz")
    @app.get("/live")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def home() -> str:
        return render_homepage(app_name=settings.app_name)

    @app.get("/tasks", response_model=list[Task])
    def list_tasks(
        request: Request,
        status: TaskStatus | None = Query(default=None),
    ) -> list[Task]:
        return _get_repository(request).list_tasks({"status": status})

    @app.post("/tasks", response_model=Task)
    def create_task(payload: CreateTaskInput, request: Request) -> Task:
        return _get_repository(request).create_task(payload)

    @app.get("/tasks/{task_id}", response_model=Task)
    def get_task(task_id: int, request: Request) -> Task:
        return _get_repository(request).get_task({"id": task_id})

    # Body fields left out keep their stored values; explicit nulls clear them.
    @app.patch("/tasks/{task_id}", response_model=Task)
    def update_task(task_id: int, payload: TaskChanges, request: Request) -> Task:
        return _get_repository(request).update_task({"id": task_id, **payload.changes()})

    @app.patch("/tasks/{task_id}/status", response_model=Task)
    def update_task_status(task_id: int, payload: TaskStatusChange, request: Request) -> Task:
        return _get_repository(request).update_task_status(
            {"id": task_id, "status": payload.status}
        )

    @app.delete("/tasks/{task_id}", response_model=DeleteTaskResult)
    def delete_task(task_id: int, request: Request) -> DeleteTaskResult:
        return _get_repository(request).delete_task({"id": task_id})

    return app


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    storage_override: TaskStorage | None,
) -> None:
    """Build, migrate and attach the repository once per app."""
    if hasattr(app.state, "repository"):
        return
    if storage_override is not None:
        task_storage = storage_override
    else:
        task_storage = build_storage(settings.database_url)
    task_storage.migrate()
    app.state.repository = TaskRepository(task_storage)
    logger.info("app event=startup storage=%s", type(task_storage).__name__)


def build_storage(database_url: str) -> TaskStorage:
    """Pick the storage backend from the database URL scheme."""
    database_url = database_url.strip()
    # Fail fast if required configuration is missing.
    if not database_url:
        raise RuntimeError("TASKBOARD_DATABASE_URL is required.")
    if database_url.startswith(POSTGRES_SCHEMES):
        return PostgresTaskStorage(database_url=database_url)
    if database_url.startswith(SQLITE_PREFIX):
        return SqliteTaskStorage(database_url[len(SQLITE_PREFIX) :])
    scheme = database_url.split(":", 1)[0]
    raise ValueError(f"Unsupported database URL scheme: {scheme!r}")


# Module-level app for `uvicorn taskboard_api.main:app`.
app = create_app()
