"""Integration-test fixtures.

Requires PostgreSQL + Redis with migrations applied (alembic upgrade head).
Skipped when the database is unreachable.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import text

from config.settings import settings
from src.au_common.database import async_session_factory, check_connection
from src.main import app

TEST_USER_ID = uuid.UUID("00000000-0000-4000-8000-00000000beef")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client that keeps the engine pool alive."""
    try:
        await check_connection()
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"database unavailable: {exc}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _token(user_id: uuid.UUID) -> str:
    claims: dict[str, object] = {
        "sub": str(user_id),
        "exp": datetime.now(UTC) + timedelta(minutes=30),
    }
    if settings.JWT_AUDIENCE:
        claims["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Authenticated client: provisions a user row and injects a Bearer token."""
    async with async_session_factory() as session:
        await session.execute(
            text("""
                INSERT INTO users (id, username, email)
                VALUES (:id, 'bid_test_user', 'bid_test@example.com')
                ON CONFLICT (id) DO NOTHING
            """),
            {"id": TEST_USER_ID},
        )
        await session.commit()
    client.headers.update({"Authorization": f"Bearer {_token(TEST_USER_ID)}"})
    return client
