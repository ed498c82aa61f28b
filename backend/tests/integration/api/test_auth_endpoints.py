from __future__ import annotations

import pytest
from httpx import AsyncClient

from school_portal.models import User

ADMIN_PASSWORD = "admin123"


async def _login(client: AsyncClient, password: str = ADMIN_PASSWORD) -> str:
    response = await client.post("/api/v1/auth/login", json={"username": "admin", "password": password})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.mark.asyncio
async def test_login_returns_token_and_public_user(anonymous_client: AsyncClient, admin_user: User) -> None:
    response = await anonymous_client.post(
        "/api/v1/auth/login",
        json={"username": "admin", "password": ADMIN_PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0
    assert body["user"] == {"id": admin_user.id, "username": "admin", "email": "admin@sekolah.com"}
    assert "password_hash" not in body["user"]


@pytest.mark.asyncio
async def test_login_failures(anonymous_client: AsyncClient, admin_user: User) -> None:
    wrong = await anonymous_client.post("/api/v1/auth/login", json={"username": "admin", "password": "salah"})
    missing = await anonymous_client.post("/api/v1/auth/login", json={"username": "admin"})

    assert wrong.status_code == 401
    assert wrong.json()["detail"] == "Invalid username or password"
    assert missing.status_code == 400


@pytest.mark.asyncio
async def test_token_grants_access_to_admin_routes(anonymous_client: AsyncClient, admin_user: User) -> None:
    token = await _login(anonymous_client)
    headers = {"Authorization": f"Bearer {token}"}

    verify = await anonymous_client.get("/api/v1/auth/verify", headers=headers)
    stats = await anonymous_client.get("/api/v1/news/stats", headers=headers)

    assert verify.status_code == 200
    assert verify.json() == {"valid": True, "user": {"id": admin_user.id, "username": "admin", "email": "admin@sekolah.com"}}
    assert stats.status_code == 200
    assert (await anonymous_client.get("/api/v1/auth/verify")).status_code == 401


@pytest.mark.asyncio
async def test_change_password_flow(anonymous_client: AsyncClient, admin_user: User) -> None:
    headers = {"Authorization": f"Bearer {await _login(anonymous_client)}"}

    too_short = await anonymous_client.post(
        "/api/v1/auth/change-password",
        json={"current_password": ADMIN_PASSWORD, "new_password": "123"},
        headers=headers,
    )
    wrong_current = await anonymous_client.post(
        "/api/v1/auth/change-password",
        json={"current_password": "keliru", "new_password": "rahasia-baru"},
        headers=headers,
    )
    changed = await anonymous_client.post(
        "/api/v1/auth/change-password",
        json={"current_password": ADMIN_PASSWORD, "new_password": "rahasia-baru"},
        headers=headers,
    )

    assert too_short.status_code == 400
    assert wrong_current.status_code == 401
    assert changed.status_code == 200
    assert changed.json()["success"] is True
    await _login(anonymous_client, password="rahasia-baru")
