import pytest
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from hamkar.config import settings
from hamkar.core.handlers import REDACTED, redact, request_body_for_log
from hamkar.db.session import get_db
from hamkar.main import app
from hamkar.services import search_service


@pytest.fixture
async def server_error_client(db):
    # Starlette re-raises after the 500 handler has answered
    app.dependency_overrides[get_db] = lambda: db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def broken_cities(monkeypatch):
    async def boom(db):
        raise RuntimeError("cities index exploded")

    monkeypatch.setattr(search_service, "distinct_cities", boom)


async def test_unexpected_error_is_a_generic_500(server_error_client, broken_cities, monkeypatch):
    monkeypatch.setattr(settings, "DEBUG", False)
    response = await server_error_client.get("/api/search/cities")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


async def test_debug_500_includes_error_text(server_error_client, broken_cities, monkeypatch):
    monkeypatch.setattr(settings, "DEBUG", True)
    response = await server_error_client.get("/api/search/cities")
    assert response.status_code == 500
    assert response.json()["error"] == "cities index exploded"


def test_redact_hides_secrets_at_any_depth():
    body = {
        "email": "sara@mail.hamkar.io",
        "password": "secret123",
        "profile": {"new_password": "x", "skills": ["go"]},
        "items": [{"access_token": "t"}],
    }
    assert redact(body) == {
        "email": "sara@mail.hamkar.io",
        "password": REDACTED,
        "profile": {"new_password": REDACTED, "skills": ["go"]},
        "items": [{"access_token": REDACTED}],
    }


def _request(content_type: bytes, preview: bytes) -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/",
            "headers": [(b"content-type", content_type)],
            "state": {"body_preview": bytearray(preview)},
        }
    )


def test_request_body_for_log():
    logged = request_body_for_log(_request(b"application/json", b'{"email": "a@b.io", "password": "pw"}'))
    assert logged == {"email": "a@b.io", "password": REDACTED}
    assert request_body_for_log(_request(b"application/json", b'{"email": "a@b')) is None
    assert request_body_for_log(_request(b"multipart/form-data; boundary=x", b"--x")) is None


async def test_declared_body_over_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_SIZE", 64)
    response = await client.post(
        "/api/auth/login", content=b"x" * 100, headers={"content-type": "application/json"}
    )
    assert response.status_code == 413
    assert response.json() == {"success": False, "message": "Request body too large"}


async def test_chunked_body_over_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_SIZE", 64)

    async def chunks():
        yield b'{"email": "sara@mail.hamkar.io", "password": "'
        yield b"x" * 100
        yield b'", "user_type": "Developer"}'

    # No Content-Length is sent for a streamed body
    response = await client.post("/api/auth/login", content=chunks(), headers={"content-type": "application/json"})
    assert response.status_code == 413
    assert response.json() == {"success": False, "message": "Request body too large"}


async def test_body_under_limit_passes(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_SIZE", 4096)
    response = await client.post(
        "/api/auth/login",
        json={"email": "nobody@mail.hamkar.io", "password": "secret123", "user_type": "Developer"},
    )
    assert response.status_code == 401
