import json
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from tests.conftest import START_MS, RecordingApi

from uninexus_offline.core.errors import StorageError
from uninexus_offline.services.sync import OfflineRuntime


def _enqueue(client: TestClient, **overrides) -> dict:
    payload = {
        "type": "post",
        "endpoint": "/api/posts",
        "payload": {"content": "written on the train"},
    }
    payload.update(overrides)
    r = client.post("/api/v1/sync/pending", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def test_status_reports_connectivity_and_backlog(client: TestClient) -> None:
    r = client.get("/api/v1/sync/status")
    assert r.status_code == 200
    assert r.json() == {
        "is_connected": True,
        "pending_actions_count": 0,
        "dead_letter_count": 0,
        "draining": False,
    }


def test_enqueue_returns_stored_action(client: TestClient) -> None:
    action = _enqueue(client)

    assert action["type"] == "post"
    assert action["method"] == "POST"
    assert action["retries"] == 0
    assert action["created_at"] == START_MS
    assert action["id"].startswith(f"{START_MS}-")
    assert json.loads(action["body"]) == {"content": "written on the train"}

    pending = client.get("/api/v1/sync/pending").json()
    assert [a["id"] for a in pending] == [action["id"]]
    assert client.get("/api/v1/sync/status").json()["pending_actions_count"] == 1


def test_enqueue_rejects_unknown_action_type(client: TestClient) -> None:
    r = client.post("/api/v1/sync/pending", json={"type": "poll", "endpoint": "/api/polls"})
    assert r.status_code == 422


def test_sync_now_delivers_in_order(client: TestClient, remote_api: RecordingApi) -> None:
    _enqueue(client, endpoint="/api/posts")
    _enqueue(client, type="reaction", endpoint="/api/posts/4/react", payload={"type": "like"})

    r = client.post("/api/v1/sync")
    assert r.status_code == 200
    assert r.json() == {"success": 2, "failed": 0, "skipped": False}
    assert [req.url.path for req in remote_api.requests] == ["/api/posts", "/api/posts/4/react"]
    assert client.get("/api/v1/sync/pending").json() == []


def test_rejected_actions_reach_dead_letter(
    client: TestClient, remote_api: RecordingApi
) -> None:
    remote_api.fail_with = 422
    action = _enqueue(client)

    results = [client.post("/api/v1/sync").json() for _ in range(3)]
    assert [r["failed"] for r in results] == [0, 0, 1]

    dead = client.get("/api/v1/sync/dead-letter").json()
    assert [d["id"] for d in dead] == [action["id"]]
    assert dead[0]["retries"] == 3
    assert client.get("/api/v1/sync/status").json()["dead_letter_count"] == 1

    assert client.delete("/api/v1/sync/dead-letter").status_code == 204
    assert client.get("/api/v1/sync/dead-letter").json() == []


def test_enqueue_storage_failure_returns_503(
    client: TestClient, runtime: OfflineRuntime, mocker
) -> None:
    mocker.patch.object(
        runtime.queue, "enqueue", new=AsyncMock(side_effect=StorageError("disk full"))
    )

    r = client.post("/api/v1/sync/pending", json={"type": "comment", "endpoint": "/api/comments"})
    assert r.status_code == 503
    assert r.json()["detail"] == "Action could not be saved and may be lost"


def test_sync_now_storage_failure_returns_503(
    client: TestClient, runtime: OfflineRuntime, mocker
) -> None:
    mocker.patch.object(
        runtime.driver, "drain", new=AsyncMock(side_effect=StorageError("disk full"))
    )

    r = client.post("/api/v1/sync")
    assert r.status_code == 503
