import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import auth_headers

import storage
from config import FILES_DIR, MAX_FILE_SIZE_BYTES
from errors import StorageFault
from api.abuse.repositories import abuse_repository
from api.abuse.services import abuse_service
from api.transfers.repositories import transfers_repository
from api.transfers.services import code_service, transfers_service

MAX = abuse_service.MAX_FAILED_ATTEMPTS
INITIAL = abuse_service.INITIAL_BLOCK_SECONDS


def upload(client, user_id="alice", filename="a.txt", content=b"hello world", **headers):
    return client.put(
        f"/api/upload/{filename}",
        content=content,
        headers={**auth_headers(user_id), "Content-Type": "text/plain", **headers},
    )


def redeem(client, code, user_id="bob"):
    return client.post("/api/redeem", json={"code": code}, headers=auth_headers(user_id))


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upload_requires_identity(client):
    response = client.put("/api/upload/a.txt", content=b"data")
    assert response.status_code == 401


def test_forged_session_token_is_rejected(client):
    response = client.put(
        "/api/upload/a.txt",
        content=b"data",
        headers={"X-Session-Token": "alice.0000"},
    )
    assert response.status_code == 401


def test_session_cookie_is_accepted(client):
    token = auth_headers("alice")["X-Session-Token"]
    response = client.put(
        "/api/upload/a.txt",
        content=b"data",
        headers={"Cookie": f"handoff_session={token}"},
    )
    assert response.status_code == 201


def test_upload_returns_connection_code(client):
    response = upload(client, **{"X-Expiry-Minutes": "5"})

    assert response.status_code == 201
    body = response.json()
    assert len(body["code"]) == code_service.CODE_MIN_LENGTH
    assert body["filename"] == "a.txt"
    assert body["size"] == 11
    assert body["content_type"] == "text/plain"
    assert body["expiry_minutes"] == 5

    record = transfers_repository.get_by_code(body["code"])
    assert record.uploader_id == "alice"
    assert storage.path_for(record.storage_handle).read_bytes() == b"hello world"


def test_upload_uses_default_expiry(client):
    body = upload(client).json()
    assert body["expiry_minutes"] == 10


def test_upload_rejects_bad_expiry_header(client):
    response = upload(client, **{"X-Expiry-Minutes": "soon"})
    assert response.status_code == 400


def test_upload_rejects_oversized_file(client):
    response = upload(client, content=b"a" * (MAX_FILE_SIZE_BYTES + 1))

    assert response.status_code == 413
    assert "max size" in response.json()["detail"]
    assert transfers_repository.count_active(datetime(2000, 1, 1, tzinfo=timezone.utc)) == 0


def test_redeem_and_download(client):
    code = upload(client, user_id="alice").json()["code"]

    response = redeem(client, code, user_id="bob")
    assert response.status_code == 200
    body = response.json()
    assert body["filename"] == "a.txt"
    assert body["size"] == 11
    assert "/api/download/" in body["download_url"]

    download = client.get(body["download_url"], headers=auth_headers("bob"))
    assert download.status_code == 200
    assert download.content == b"hello world"
    assert download.headers["content-type"].startswith("text/plain")
    assert "attachment" in download.headers["content-disposition"]

    record = transfers_repository.get_by_code(code)
    assert record.status == "DOWNLOADED"
    assert record.downloader_id == "bob"


def test_download_link_is_single_use(client):
    code = upload(client).json()["code"]
    url = redeem(client, code).json()["download_url"]

    assert client.get(url, headers=auth_headers("bob")).status_code == 200
    assert client.get(url, headers=auth_headers("bob")).status_code == 404
    assert redeem(client, code, user_id="carol").status_code == 404


def test_download_requires_identity(client):
    code = upload(client).json()["code"]
    url = redeem(client, code).json()["download_url"]

    assert client.get(url).status_code == 401


def test_unknown_download_token_is_not_found(client):
    response = client.get("/api/download/not-a-token", headers=auth_headers("bob"))
    assert response.status_code == 404


def test_uploader_cannot_redeem_own_code(client):
    code = upload(client, user_id="alice").json()["code"]

    response = redeem(client, code, user_id="alice")

    assert response.status_code == 404
    assert response.json()["attempts_left"] == MAX - 1


def test_wrong_code_reports_attempts_left(client):
    upload(client)
    response = redeem(client, "ZZZZZZZZ")

    assert response.status_code == 404
    assert response.json() == {
        "detail": "Invalid or expired connection code",
        "attempts_left": MAX - 1,
    }


def test_repeated_bad_codes_block_the_client(client):
    code = upload(client).json()["code"]

    for _ in range(MAX - 1):
        assert redeem(client, "ZZZZZZZZ").status_code == 404

    blocking = redeem(client, "ZZZZZZZZ")
    assert blocking.status_code == 429
    assert blocking.json()["timeout_seconds"] == INITIAL
    assert abuse_service.is_blocked("testclient")

    # Even the right code is refused while blocked
    gated = redeem(client, code)
    assert gated.status_code == 429
    assert 0 < gated.json()["timeout_seconds"] <= INITIAL
    assert int(gated.headers["retry-after"]) == gated.json()["timeout_seconds"]
    assert transfers_repository.get_by_code(code).download_token is None


def test_successful_redeem_resets_failures(client):
    code = upload(client).json()["code"]
    for _ in range(MAX - 1):
        redeem(client, "ZZZZZZZZ")

    assert redeem(client, code).status_code == 200

    response = redeem(client, "ZZZZZZZZ")
    assert response.json()["attempts_left"] == MAX - 1


def test_empty_code_is_a_validation_error(client):
    response = client.post("/api/redeem", json={"code": ""}, headers=auth_headers("bob"))
    assert response.status_code == 422


def test_failed_create_returns_500_and_discards_the_blob(client, monkeypatch):
    def fail_create(**kwargs):
        raise StorageFault("no free codes")

    monkeypatch.setattr(transfers_service, "create", fail_create)
    before = set(FILES_DIR.iterdir())

    response = upload(client)

    assert response.status_code == 500
    assert response.json() == {"detail": "Storage failure"}
    assert set(FILES_DIR.iterdir()) == before


def test_database_error_on_redeem_returns_500(client, monkeypatch):
    def broken_lookup(code):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(transfers_repository, "get_by_code", broken_lookup)

    response = redeem(client, "ABCDEFGH")

    assert response.status_code == 500
    assert response.json() == {"detail": "Storage failure"}
    assert abuse_repository.get_by_client_id("testclient") is None


def test_upload_creates_transfer_off_the_event_loop(client, monkeypatch):
    original = transfers_service.create
    seen = []

    def create_outside_loop(**kwargs):
        with pytest.raises(RuntimeError):
            asyncio.get_running_loop()
        seen.append(kwargs["filename"])
        return original(**kwargs)

    monkeypatch.setattr(transfers_service, "create", create_outside_loop)

    response = upload(client, filename="notes.txt")

    assert response.status_code == 201
    assert seen == ["notes.txt"]
