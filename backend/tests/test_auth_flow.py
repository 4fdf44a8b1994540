import pytest
from httpx import AsyncClient

from conftest import ADMIN_EMAIL, PASSWORD, bearer, register_user


@pytest.mark.asyncio
async def test_register_login_token_me_flow(client: AsyncClient) -> None:
    auth_data = await register_user(client, email="Artist@Example.com", full_name="Artist User")
    assert auth_data["user"]["email"] == "artist@example.com"
    assert auth_data["user"]["role"] == "member"
    assert auth_data["token"]["token_type"] == "bearer"

    login_res = await client.post(
        "/auth/login",
        json={"email": "artist@example.com", "password": PASSWORD},
    )
    assert login_res.status_code == 200
    assert login_res.json()["user"]["full_name"] == "Artist User"

    token_res = await client.post(
        "/auth/token",
        data={"username": "artist@example.com", "password": PASSWORD},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert token_res.status_code == 200
    oauth_token = token_res.json()["access_token"]

    me_res = await client.get("/auth/me", headers=bearer(oauth_token))
    assert me_res.status_code == 200
    assert me_res.json()["email"] == "artist@example.com"


@pytest.mark.asyncio
async def test_configured_admin_email_registers_as_admin(client: AsyncClient) -> None:
    auth_data = await register_user(client, email=ADMIN_EMAIL)
    assert auth_data["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_duplicate_email_and_bad_credentials_are_rejected(client: AsyncClient) -> None:
    await register_user(client, email="dupe@example.com")

    duplicate_res = await client.post(
        "/auth/register",
        json={"email": "dupe@example.com", "password": PASSWORD, "full_name": "Someone"},
    )
    assert duplicate_res.status_code == 409

    wrong_password_res = await client.post(
        "/auth/login",
        json={"email": "dupe@example.com", "password": "wrongpass123"},
    )
    assert wrong_password_res.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_valid_token(client: AsyncClient) -> None:
    missing_res = await client.get("/auth/me")
    assert missing_res.status_code == 401

    garbage_res = await client.get("/auth/me", headers=bearer("not-a-token"))
    assert garbage_res.status_code == 401


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "Arkom API"}
