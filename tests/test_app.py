"""Tests for application assembly."""

import httpx
from httpx import ASGITransport, AsyncClient

from app.config.settings import Settings
from app.core.token_validator import RemoteTokenValidator
from app.main import create_app


async def test_health_echoes_request_id(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"] == "req-42"


async def test_request_id_is_generated(client):
    response = await client.get("/")
    assert response.headers["X-Request-ID"]


async def test_pipeline_is_built_once(app):
    assert app.state.auth_pipeline.guards[1].validator is app.state.token_validator


async def test_remote_strategy_end_to_end():
    def authority(request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != "Bearer remote-token":
            return httpx.Response(401)
        return httpx.Response(200, json={
            "sub": "ext-1",
            "username": "ext",
            "roles": ["user"],
            "permissions": ["operations:read"],
        })

    validator = RemoteTokenValidator(
        "https://auth.example.com",
        client=httpx.AsyncClient(transport=httpx.MockTransport(authority)),
    )
    application = create_app(Settings(auth_strategy="remote"), token_validator=validator)

    async with AsyncClient(transport=ASGITransport(app=application), base_url="http://test") as ac:
        ok = await ac.get("/api/v1/auth/userinfo", headers={"Authorization": "Bearer remote-token"})
        denied = await ac.get("/api/v1/auth/userinfo", headers={"Authorization": "Bearer other"})

    assert ok.status_code == 200
    assert ok.json()["username"] == "ext"
    assert denied.status_code == 401
    assert denied.json()["detail"] == "Invalid token"
