"""
API Endpoint Tests

End-to-end behaviour over HTTP with the FastAPI TestClient. Background
tasks run before each TestClient call returns, so after an upload or a
regenerate the next GET already sees DONE or ERROR.
"""

import pytest

from photomap.main import app
from photomap.services.upload_validator import UploadValidator
from photomap.services.vision import MockVisionProvider, ProviderError, ProviderUnavailable
from photomap.services.vision.mock import MOCK_DESCRIPTION

from conftest import ALICE, BOB, NO_FIX_GPS, FailingProvider, make_jpeg, make_jpeg_with_gps_ifd

PHOTOS = "/api/v1/photos"


# =============================================================================
# HEALTH CHECK TESTS
# =============================================================================

def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_readiness_check(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["checks"]["storage"]["status"] == "healthy"
    assert body["checks"]["vision_provider"] == "mock"


def test_readiness_reports_missing_upload_dir(client, monkeypatch, tmp_path):
    monkeypatch.setattr(app.state.storage, "base_path", tmp_path / "gone")

    body = client.get("/health/ready").json()

    assert body["status"] == "not_ready"
    assert body["checks"]["storage"]["status"] == "unhealthy"
    assert body["checks"]["database"]["status"] == "healthy"


# =============================================================================
# AUTHENTICATION TESTS
# =============================================================================

@pytest.mark.parametrize("method,path", [
    ("get", PHOTOS),
    ("post", PHOTOS),
    ("get", f"{PHOTOS}/some-id"),
    ("delete", f"{PHOTOS}/some-id"),
    ("post", f"{PHOTOS}/some-id/regenerate-description"),
    ("get", f"{PHOTOS}/some-id/comments"),
    ("post", f"{PHOTOS}/some-id/comments"),
])
def test_endpoints_require_authentication(client, method, path):
    response = getattr(client, method)(path)
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthorized"


def test_invalid_token_is_rejected(client):
    response = client.get(PHOTOS, headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


# =============================================================================
# UPLOAD TESTS
# =============================================================================

def test_upload_returns_pending_then_done(client, alice_headers, eiffel_jpeg):
    response = client.post(
        PHOTOS,
        files={"file": ("eiffel.jpg", eiffel_jpeg, "image/jpeg")},
        headers=alice_headers,
    )

    assert response.status_code == 201
    created = response.json()
    assert created["ai_status"] == "PENDING"
    assert created["ai_description"] is None
    assert created["lat"] == pytest.approx(48.8584, abs=1e-5)
    assert created["lng"] == pytest.approx(2.2945, abs=1e-5)
    assert created["url"].startswith("/uploads/")

    detail = client.get(f"{PHOTOS}/{created['id']}", headers=alice_headers).json()
    assert detail["ai_status"] == "DONE"
    assert detail["ai_description"] == MOCK_DESCRIPTION
    assert detail["ai_error"] is None
    assert detail["owner_id"] == ALICE


def test_uploaded_image_is_served(client, alice_headers, upload_photo, eiffel_jpeg):
    created = upload_photo(alice_headers)

    response = client.get(created["url"])
    assert response.status_code == 200
    assert response.content == eiffel_jpeg


@pytest.mark.parametrize("exc", [
    ProviderUnavailable("Cannot connect to vision backend at http://localhost:11434."),
    ProviderError("Vision backend error (500): model not loaded"),
])
def test_provider_failure_records_error(client, alice_headers, upload_photo, use_provider, exc):
    use_provider(FailingProvider(exc))

    created = upload_photo(alice_headers)
    assert created["ai_status"] == "PENDING"

    detail = client.get(f"{PHOTOS}/{created['id']}", headers=alice_headers).json()
    assert detail["ai_status"] == "ERROR"
    assert detail["ai_error"] == str(exc)
    assert detail["ai_description"] is None


def test_upload_rejects_non_jpeg(client, alice_headers):
    response = client.post(
        PHOTOS,
        files={"file": ("notes.txt", b"plain text, not exif", "text/plain")},
        headers=alice_headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "invalid_media_type"
    assert "text/plain" in body["error"]


def test_upload_rejects_oversized_file(client, alice_headers, eiffel_jpeg, monkeypatch):
    monkeypatch.setattr(app.state, "upload_validator", UploadValidator(max_upload_bytes=64))

    response = client.post(
        PHOTOS,
        files={"file": ("eiffel.jpg", eiffel_jpeg, "image/jpeg")},
        headers=alice_headers,
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "payload_too_large"


def test_upload_rejects_photo_without_gps(client, alice_headers, untagged_jpeg):
    response = client.post(
        PHOTOS,
        files={"file": ("plain.jpg", untagged_jpeg, "image/jpeg")},
        headers=alice_headers,
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "missing_location"


def test_upload_rejects_photo_without_gps_fix(client, alice_headers):
    stored_before = set(app.state.storage.base_path.iterdir())

    response = client.post(
        PHOTOS,
        files={"file": ("nofix.jpg", make_jpeg_with_gps_ifd(NO_FIX_GPS), "image/jpeg")},
        headers=alice_headers,
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "missing_location"
    assert set(app.state.storage.base_path.iterdir()) == stored_before


def test_upload_without_file(client, alice_headers):
    response = client.post(PHOTOS, data={"other": "field"}, headers=alice_headers)
    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"


def test_rejected_upload_creates_nothing(client, alice_headers, untagged_jpeg):
    client.post(
        PHOTOS,
        files={"file": ("plain.jpg", untagged_jpeg, "image/jpeg")},
        headers=alice_headers,
    )
    assert client.get(PHOTOS, headers=alice_headers).json() == []


# =============================================================================
# LIST / DETAIL TESTS
# =============================================================================

def test_list_scopes(client, alice_headers, bob_headers, upload_photo):
    alice_photo = upload_photo(alice_headers)

    bob_mine = client.get(PHOTOS, params={"scope": "mine"}, headers=bob_headers).json()
    bob_all = client.get(PHOTOS, params={"scope": "all"}, headers=bob_headers).json()
    alice_mine = client.get(PHOTOS, headers=alice_headers).json()

    assert bob_mine == []
    assert [p["id"] for p in bob_all] == [alice_photo["id"]]
    assert [p["id"] for p in alice_mine] == [alice_photo["id"]]


def test_list_all_flag(client, alice_headers, bob_headers, upload_photo):
    upload_photo(alice_headers)
    response = client.get(PHOTOS, params={"all": "true"}, headers=bob_headers)
    assert len(response.json()) == 1


def test_list_is_newest_first_and_minimal(client, alice_headers, upload_photo):
    first = upload_photo(alice_headers, make_jpeg(10.0, 20.0))
    second = upload_photo(alice_headers, make_jpeg(30.0, 40.0))

    items = client.get(PHOTOS, headers=alice_headers).json()

    assert [p["id"] for p in items] == [second["id"], first["id"]]
    assert set(items[0]) == {"id", "lat", "lng", "created_at"}


def test_list_rejects_unknown_scope(client, alice_headers):
    response = client.get(PHOTOS, params={"scope": "everyone"}, headers=alice_headers)
    assert response.status_code == 400


def test_any_user_can_read_detail(client, alice_headers, bob_headers, upload_photo):
    created = upload_photo(alice_headers)

    response = client.get(f"{PHOTOS}/{created['id']}", headers=bob_headers)

    assert response.status_code == 200
    assert response.json()["owner_id"] == ALICE


def test_unknown_photo_is_not_found(client, alice_headers):
    response = client.get(f"{PHOTOS}/does-not-exist", headers=alice_headers)
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


# =============================================================================
# DELETE TESTS
# =============================================================================

def test_owner_deletes_photo_file_and_comments(client, alice_headers, bob_headers, upload_photo):
    created = upload_photo(alice_headers)
    photo_url = f"{PHOTOS}/{created['id']}"
    client.post(f"{photo_url}/comments", json={"content": "nice"}, headers=bob_headers)

    response = client.delete(photo_url, headers=alice_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Photo deleted successfully"}
    assert client.get(photo_url, headers=alice_headers).status_code == 404
    assert client.get(f"{photo_url}/comments", headers=bob_headers).status_code == 404
    assert not app.state.storage.exists(created["url"])


def test_non_owner_delete_is_not_found(client, alice_headers, bob_headers, upload_photo):
    created = upload_photo(alice_headers)
    photo_url = f"{PHOTOS}/{created['id']}"

    response = client.delete(photo_url, headers=bob_headers)

    assert response.status_code == 404
    assert response.json()["error"] == "Photo not found"
    assert client.get(photo_url, headers=alice_headers).status_code == 200
    assert app.state.storage.exists(created["url"])


def test_non_owner_cannot_tell_missing_from_foreign(client, alice_headers, bob_headers, upload_photo):
    created = upload_photo(alice_headers)

    foreign = client.delete(f"{PHOTOS}/{created['id']}", headers=bob_headers)
    missing = client.delete(f"{PHOTOS}/does-not-exist", headers=bob_headers)

    assert foreign.status_code == missing.status_code == 404
    assert foreign.json()["error"] == missing.json()["error"]
    assert foreign.json()["kind"] == missing.json()["kind"]


def test_delete_survives_missing_file(client, alice_headers, upload_photo):
    created = upload_photo(alice_headers)
    app.state.storage.delete(created["url"])

    response = client.delete(f"{PHOTOS}/{created['id']}", headers=alice_headers)

    assert response.status_code == 200
    assert client.get(f"{PHOTOS}/{created['id']}", headers=alice_headers).status_code == 404


# =============================================================================
# REGENERATE TESTS
# =============================================================================

def test_regenerate_recovers_from_error(client, alice_headers, upload_photo, use_provider):
    failing = use_provider(FailingProvider(ProviderUnavailable("Cannot connect")))
    created = upload_photo(alice_headers)
    photo_url = f"{PHOTOS}/{created['id']}"
    assert client.get(photo_url, headers=alice_headers).json()["ai_status"] == "ERROR"

    use_provider(FailingProvider(ProviderError("still broken")))
    response = client.post(f"{photo_url}/regenerate-description", headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["ai_status"] == "PENDING"
    assert client.get(photo_url, headers=alice_headers).json()["ai_error"] == "still broken"
    assert failing.calls == 1


def test_regenerate_produces_description(client, alice_headers, upload_photo, use_provider):
    use_provider(FailingProvider(ProviderError("first attempt failed")))
    created = upload_photo(alice_headers)
    photo_url = f"{PHOTOS}/{created['id']}"

    use_provider(MockVisionProvider(delay=0))
    response = client.post(f"{photo_url}/regenerate-description", headers=alice_headers)

    assert response.status_code == 200
    detail = client.get(photo_url, headers=alice_headers).json()
    assert detail["ai_status"] == "DONE"
    assert detail["ai_description"] == MOCK_DESCRIPTION
    assert detail["ai_error"] is None


def test_non_owner_regenerate_is_not_found(client, alice_headers, bob_headers, upload_photo):
    created = upload_photo(alice_headers)

    response = client.post(
        f"{PHOTOS}/{created['id']}/regenerate-description",
        headers=bob_headers,
    )

    assert response.status_code == 404
    detail = client.get(f"{PHOTOS}/{created['id']}", headers=alice_headers).json()
    assert detail["ai_status"] == "DONE"


# =============================================================================
# COMMENT TESTS
# =============================================================================

def test_any_user_can_comment(client, alice_headers, bob_headers, upload_photo):
    created = upload_photo(alice_headers)

    response = client.post(
        f"{PHOTOS}/{created['id']}/comments",
        json={"content": "  Great spot!  "},
        headers=bob_headers,
    )

    assert response.status_code == 201
    comment = response.json()
    assert comment["content"] == "Great spot!"
    assert comment["author_id"] == BOB
    assert comment["photo_id"] == created["id"]


def test_comments_are_oldest_first(client, alice_headers, bob_headers, upload_photo):
    created = upload_photo(alice_headers)
    url = f"{PHOTOS}/{created['id']}/comments"
    for text in ["first", "second", "third"]:
        client.post(url, json={"content": text}, headers=bob_headers)

    comments = client.get(url, headers=alice_headers).json()

    assert [c["content"] for c in comments] == ["first", "second", "third"]


def test_comment_length_limits(client, alice_headers, upload_photo):
    created = upload_photo(alice_headers)
    url = f"{PHOTOS}/{created['id']}/comments"

    at_limit = client.post(url, json={"content": "a" * 500}, headers=alice_headers)
    padded = client.post(url, json={"content": "  " + "b" * 500 + "  "}, headers=alice_headers)
    too_long = client.post(url, json={"content": "c" * 501}, headers=alice_headers)

    assert at_limit.status_code == 201
    assert padded.status_code == 201
    assert too_long.status_code == 400
    assert too_long.json()["kind"] == "invalid_comment"
    assert "501" in too_long.json()["error"]


@pytest.mark.parametrize("body", [
    {"content": ""},
    {"content": "   \n\t "},
    {"content": 42},
    {},
])
def test_invalid_comment_bodies(client, alice_headers, upload_photo, body):
    created = upload_photo(alice_headers)

    response = client.post(
        f"{PHOTOS}/{created['id']}/comments",
        json=body,
        headers=alice_headers,
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_comment"


def test_comment_on_unknown_photo(client, alice_headers):
    url = f"{PHOTOS}/does-not-exist/comments"

    assert client.get(url, headers=alice_headers).status_code == 404
    response = client.post(url, json={"content": "hello"}, headers=alice_headers)
    assert response.status_code == 404
