from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from taskboard_api.app.errors import StorageError
from taskboard_api.app.storage_sqlite import SqliteTaskStorage


def _create(client: TestClient, title: str, description: str | None = None) -> dict:
    response = client.post("/tasks", json={"title": title, "description": description})
    assert response.status_code == 200
    return response.json()


def test_task_lifecycle(client: TestClient) -> None:
    task = _create(client, "Buy milk")
    assert task["status"] == "pending"
    assert task["description"] is None
    assert task["created_at"] == task["updated_at"]

    listed = client.get("/tasks")
    assert listed.status_code == 200
    assert [(item["id"], item["status"]) for item in listed.json()] == [(task["id"], "pending")]

    toggled = client.patch(f"/tasks/{task['id']}/status", json={"status": "completed"})
    assert toggled.status_code == 200
    assert toggled.json()["status"] == "completed"

    completed_ids = [item["id"] for item in client.get("/tasks?status=completed").json()]
    pending_ids = [item["id"] for item in client.get("/tasks?status=pending").json()]
    assert task["id"] in completed_ids
    assert task["id"] not in pending_ids

    deleted = client.delete(f"/tasks/{task['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "id": task["id"]}

    assert client.get("/tasks").json() == []
    assert client.get(f"/tasks/{task['id']}").status_code == 404


def test_list_returns_newest_first(client: TestClient) -> None:
    ids = [_create(client, f"task {index}")["id"] for index in range(3)]

    listed = client.get("/tasks").json()

    assert [item["id"] for item in listed] == list(reversed(ids))


def test_create_rejects_empty_title(client: TestClient) -> None:
    response = client.post("/tasks", json={"title": "", "description": None})

    assert response.status_code == 422
    assert client.get("/tasks").json() == []


def test_patch_changes_only_supplied_fields(client: TestClient) -> None:
    task = _create(client, "Draft", "first pass")

    renamed = client.patch(f"/tasks/{task['id']}", json={"title": "Final"}).json()
    assert renamed["title"] == "Final"
    assert renamed["description"] == "first pass"
    assert renamed["status"] == "pending"
    assert renamed["created_at"] == task["created_at"]
    assert datetime.fromisoformat(renamed["updated_at"]) >= datetime.fromisoformat(
        task["updated_at"]
    )

    cleared = client.patch(f"/tasks/{task['id']}", json={"description": None}).json()
    assert cleared["description"] is None
    assert cleared["title"] == "Final"

    fetched = client.get(f"/tasks/{task['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == cleared


def test_patch_rejects_null_title(client: TestClient) -> None:
    task = _create(client, "Keep title")

    response = client.patch(f"/tasks/{task['id']}", json={"title": None})

    assert response.status_code == 422
    assert client.get(f"/tasks/{task['id']}").json()["title"] == "Keep title"


@pytest.mark.parametrize(
    ("method", "path", "body"),
    [
        ("PATCH", "/tasks/99999", {"title": "ghost"}),
        ("PATCH", "/tasks/99999/status", {"status": "completed"}),
        ("DELETE", "/tasks/99999", None),
        ("GET", "/tasks/99999", None),
    ],
)
def test_unknown_task_returns_404(
    client: TestClient,
    method: str,
    path: str,
    body: dict | None,
) -> None:
    bystander = _create(client, "bystander")

    response = client.request(method, path, json=body)

    assert response.status_code == 404
    assert response.json() == {"detail": "Task 99999 not found"}
    assert client.get("/tasks").json() == [bystander]


def test_invalid_status_values_are_rejected(client: TestClient) -> None:
    task = _create(client, "status check")

    assert client.get("/tasks?status=archived").status_code == 422
    response = client.patch(f"/tasks/{task['id']}/status", json={"status": "done"})
    assert response.status_code == 422


def test_storage_failure_maps_to_503(
    client: TestClient,
    storage: SqliteTaskStorage,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def unavailable(status: str | None = None) -> list:
        raise StorageError("database is locked")

    monkeypatch.setattr(storage, "list_tasks", unavailable)

    response = client.get("/tasks")

    assert response.status_code == 503
    assert response.json() == {"detail": "Task storage unavailable"}
