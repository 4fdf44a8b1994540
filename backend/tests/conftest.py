import os
from collections.abc import AsyncIterator

os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from arkom.core.db import enable_sqlite_foreign_keys, get_session
from arkom.main import app
from arkom.models import catalogue as _catalogue  # noqa: F401
from arkom.models import service as _service  # noqa: F401
from arkom.models import sub_category_filter as _sub_category_filter  # noqa: F401
from arkom.models import user as _user  # noqa: F401

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "testpass123"


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    enable_sqlite_foreign_keys(engine)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()
    await engine.dispose()


async def register_user(
    client: AsyncClient,
    *,
    email: str,
    full_name: str = "Test User",
) -> dict:
    response = await client.post(
        "/auth/register",
        json={"email": email, "password": PASSWORD, "full_name": full_name},
    )
    assert response.status_code == 201
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_token(client: AsyncClient) -> str:
    auth_data = await register_user(client, email=ADMIN_EMAIL, full_name="Arkom Admin")
    assert auth_data["user"]["role"] == "admin"
    return auth_data["token"]["access_token"]


@pytest.fixture
async def member_token(client: AsyncClient) -> str:
    auth_data = await register_user(client, email="artist@example.com", full_name="Artist One")
    assert auth_data["user"]["role"] == "member"
    return auth_data["token"]["access_token"]
