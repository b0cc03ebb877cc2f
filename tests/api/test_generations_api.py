"""HTTP-level tests: auth, validation, response shape, history and deletion."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from imagemax.api.deps import get_provider_factory
from imagemax.db.session import get_db
from imagemax.main import app
from imagemax.models import Chat, GenerationBatch, ImageGeneration
from imagemax.services.auth import issue_token
from imagemax.services.image_generation.providers.mock import MockProvider
from imagemax.storage.local import LocalBlobStorage

MOCK_URL = "https://cdn.example.com/mock.png"


def _providers():
    return [
        MockProvider("dalle", delay=0, failure_rate=0.0, image_url=MOCK_URL),
        MockProvider("stability", delay=0, failure_rate=1.0, image_url=MOCK_URL),
        MockProvider("midjourney", delay=0, failure_rate=0.0, image_url=MOCK_URL),
    ]


@pytest.fixture
def client(db, tmp_path):
    factory = MagicMock()
    factory.get_providers.side_effect = _providers

    def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_provider_factory] = lambda: factory
    app.state.storage = LocalBlobStorage(str(tmp_path), "http://cdn")
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def _auth(user_id="user-1"):
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


def _generate(client, prompt="A cat", chat_id="c1", user_id="user-1"):
    return client.post(
        "/generate-images",
        json={"prompt": prompt, "chatId": chat_id, "userId": user_id},
        headers=_auth(user_id),
    )


def test_generate_returns_one_entry_per_provider(client):
    resp = _generate(client)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["batchId"]
    images = body["images"]
    assert [i["provider"] for i in images] == ["dalle", "stability", "midjourney"]
    assert [i["status"] for i in images] == ["completed", "failed", "completed"]
    assert images[0]["imageUrl"] == MOCK_URL
    assert images[1]["imageUrl"] is None
    assert images[1]["error"] == "Mock stability service temporarily unavailable"
    assert images[0]["error"] is None


def test_unauthenticated_request_is_rejected_before_validation(client, db):
    resp = client.post("/generate-images", json={})

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized"}
    assert db.query(Chat).count() == 0


def test_missing_prompt_is_bad_request_and_persists_nothing(client, db):
    resp = client.post(
        "/generate-images",
        json={"chatId": "c1", "userId": "user-1"},
        headers=_auth(),
    )

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert db.query(Chat).count() == 0
    assert db.query(GenerationBatch).count() == 0
    assert db.query(ImageGeneration).count() == 0


def test_user_id_must_match_token(client, db):
    resp = client.post(
        "/generate-images",
        json={"prompt": "A cat", "chatId": "c1", "userId": "someone-else"},
        headers=_auth("user-1"),
    )

    assert resp.status_code == 400
    assert db.query(Chat).count() == 0


def test_chat_owned_by_other_user_is_not_found(client):
    _generate(client, user_id="owner")

    resp = _generate(client, user_id="intruder")

    assert resp.status_code == 404


def test_get_batch_returns_persisted_state(client):
    batch_id = _generate(client).json()["batchId"]

    resp = client.get(f"/batches/{batch_id}", headers=_auth())

    assert resp.status_code == 200
    batch = resp.json()["batch"]
    assert batch["id"] == batch_id
    assert batch["chatId"] == "c1"
    assert batch["prompt"] == "A cat"
    assert [i["status"] for i in batch["images"]] == ["completed", "failed", "completed"]


def test_get_batch_of_other_user_is_not_found(client):
    batch_id = _generate(client).json()["batchId"]

    assert client.get(f"/batches/{batch_id}", headers=_auth("user-2")).status_code == 404


def test_delete_batch_cascades(client, db):
    batch_id = _generate(client).json()["batchId"]

    resp = client.delete(f"/batches/{batch_id}", headers=_auth())

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get(f"/batches/{batch_id}", headers=_auth()).status_code == 404
    assert db.query(ImageGeneration).filter(ImageGeneration.batch_id == batch_id).count() == 0


def test_generation_history_pages(client):
    ids = [_generate(client, prompt=f"prompt {i}").json()["batchId"] for i in range(3)]

    first = client.get("/generation-history", params={"limit": 2}, headers=_auth()).json()
    rest = client.get(
        "/generation-history",
        params={"limit": 2, "ending_before": first["batches"][-1]["id"]},
        headers=_auth(),
    ).json()

    assert first["hasMore"] is True
    assert len(first["batches"]) == 2
    assert rest["hasMore"] is False
    seen = [b["id"] for b in first["batches"] + rest["batches"]]
    assert sorted(seen) == sorted(ids)
    assert len(first["batches"][0]["images"]) == 3


def test_chat_detail_history_and_delete(client, db):
    _generate(client, prompt="A cat", chat_id="c1")
    _generate(client, prompt="A dog", chat_id="c1")
    _generate(client, prompt="x" * 80, chat_id="c2")

    detail = client.get("/chats/c1", headers=_auth()).json()["chat"]
    assert detail["title"] == "A cat"
    assert detail["updatedAt"]
    assert [b["prompt"] for b in detail["batches"]] == ["A cat", "A dog"]

    history = client.get("/history", headers=_auth()).json()
    assert {c["id"] for c in history["chats"]} == {"c1", "c2"}
    assert history["hasMore"] is False
    titles = {c["id"]: c["title"] for c in history["chats"]}
    assert titles["c2"] == "x" * 50 + "..."

    assert client.delete("/chats/c1", headers=_auth()).status_code == 200
    assert client.get("/chats/c1", headers=_auth()).status_code == 404
    assert db.query(GenerationBatch).filter(GenerationBatch.chat_id == "c1").count() == 0


def test_history_limit_is_validated(client):
    resp = client.get("/history", params={"limit": 0}, headers=_auth())

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid request"}


def test_malformed_body_without_token_is_unauthorized(client, db):
    resp = client.post(
        "/generate-images",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized"}
    assert db.query(Chat).count() == 0


def test_malformed_body_with_token_is_bad_request(client, db):
    resp = client.post(
        "/generate-images",
        content=b"{not json",
        headers={**_auth(), "Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid request"}
    assert db.query(Chat).count() == 0


def test_persistence_failure_is_internal_error(client):
    def broken_db():
        session = MagicMock()
        session.get.side_effect = RuntimeError("database is gone")
        yield session

    app.dependency_overrides[get_db] = broken_db

    resp = _generate(client)

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Internal server error"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
