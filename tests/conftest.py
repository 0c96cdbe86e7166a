"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET; must be set before any src/config import
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-unit-tests")

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from config.settings import settings
from src.main import app


def make_token(
    subject: str | int | None,
    expires_in: timedelta = timedelta(minutes=30),
    secret: str | None = None,
) -> str:
    """Sign a bearer token the way the external auth service does."""
    now = datetime.now(UTC)
    payload: dict[str, object] = {"iat": now, "exp": now + expires_in}
    if subject is not None:
        payload["sub"] = str(subject)
    return str(
        jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    )


@pytest.fixture
def token_for() -> Callable[..., str]:
    return make_token


@pytest.fixture
def auth_headers() -> Callable[[int], dict[str, str]]:
    def _headers(credentials_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(credentials_id)}"}

    return _headers


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
