from uuid import uuid4

from fastapi.testclient import TestClient

from app.main import app


def _user():
    return {"X-User-Id": f"browser-{uuid4().hex[:8]}"}


def test_can_create_and_list_tasks():
    with TestClient(app) as client:
        headers = _user()
        payload = {"title": "Write CI and tests"}
        r = client.post("/api/tasks", json=payload, headers=headers)
        assert r.status_code == 201, r.text
        created = r.json()
        assert created["id"] >= 1
        assert created["title"] == payload["title"]
        assert created["status"] == "PENDING"
        assert created["priority"] == "MEDIUM"
        assert created["user_id"] == headers["X-User-Id"]

        r = client.get("/api/tasks", headers=headers)
        assert r.status_code == 200
        items = r.json()
        assert [t["title"] for t in items] == [payload["title"]]


def test_tasks_are_scoped_per_user():
    with TestClient(app) as client:
        alice, bob = _user(), _user()
        client.post("/api/tasks", json={"title": "Alice task"}, headers=alice)
        client.post("/api/tasks", json={"title": "Bob task"}, headers=bob)

        titles = [t["title"] for t in client.get("/api/tasks", headers=alice).json()]
        assert titles == ["Alice task"]


def test_blank_user_header_is_ignored():
    with TestClient(app) as client:
        r = client.post("/api/tasks", json={"title": "Anonymous"}, headers={"X-User-Id": "undefined"})
        assert r.status_code == 201
        assert r.json()["user_id"] is None


def test_update_and_filter_by_status():
    with TestClient(app) as client:
        headers = _user()
        task_id = client.post("/api/tasks", json={"title": "Move me"}, headers=headers).json()["id"]

        r = client.patch(
            f"/api/tasks/{task_id}",
            json={"status": "IN_PROGRESS", "priority": "HIGH", "due_date": "2026-10-23T17:00:00+02:00"},
            headers=headers,
        )
        assert r.status_code == 200, r.text
        body = r.json()
        assert body["status"] == "IN_PROGRESS"
        assert body["priority"] == "HIGH"
        assert body["title"] == "Move me"
        assert body["due_date"].startswith("2026-10-23T15:00:00")

        r = client.get("/api/tasks", params={"status": "IN_PROGRESS"}, headers=headers)
        assert [t["id"] for t in r.json()] == [task_id]
        r = client.get("/api/tasks", params={"status": "DONE"}, headers=headers)
        assert r.json() == []


def test_get_and_update_missing_task_return_404():
    with TestClient(app) as client:
        assert client.get("/api/tasks/999999").status_code == 404
        assert client.patch("/api/tasks/999999", json={"title": "x"}).status_code == 404


def test_delete_is_idempotent():
    with TestClient(app) as client:
        headers = _user()
        task_id = client.post("/api/tasks", json={"title": "Delete me"}, headers=headers).json()["id"]

        assert client.delete(f"/api/tasks/{task_id}", headers=headers).status_code == 204
        assert client.delete(f"/api/tasks/{task_id}", headers=headers).status_code == 204
        assert client.get(f"/api/tasks/{task_id}", headers=headers).status_code == 404


def test_invalid_payload_returns_400():
    with TestClient(app) as client:
        r = client.post("/api/tasks", json={"title": ""})
        assert r.status_code == 400
        assert "errors" in r.json()

        r = client.post("/api/tasks", json={"title": "ok", "priority": "SOMEDAY"})
        assert r.status_code == 400


def test_health_and_root():
    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok", "db": "up"}
        assert client.get("/").json()["ok"] is True


def test_patch_with_null_is_rejected():
    with TestClient(app) as client:
        headers = _user()
        task_id = client.post("/api/tasks", json={"title": "Keep my status"}, headers=headers).json()["id"]

        for field in ("status", "priority", "title"):
            r = client.patch(f"/api/tasks/{task_id}", json={field: None}, headers=headers)
            assert r.status_code == 400, r.text

        # due_date and description are nullable
        r = client.patch(f"/api/tasks/{task_id}", json={"due_date": None, "description": None}, headers=headers)
        assert r.status_code == 200, r.text
        body = r.json()
        assert body["status"] == "PENDING"
        assert body["title"] == "Keep my status"


def test_stored_datetimes_are_returned_as_utc():
    with TestClient(app) as client:
        r = client.post("/api/tasks", json={"title": "Pay rent", "due_date": "2026-11-01T09:00:00-07:00"})
        assert r.status_code == 201, r.text
        body = r.json()
        assert body["due_date"] == "2026-11-01T16:00:00Z"
        assert body["created_at"].endswith("Z")


def test_unknown_route_returns_json_error():
    with TestClient(app) as client:
        r = client.get("/api/nope")
        assert r.status_code == 404
        assert r.json() == {"error": {"message": "Route not found", "path": "/api/nope"}}

        # a matched route keeps its own 404 detail
        assert client.get("/api/tasks/999999").json() == {"detail": "Task not found"}
