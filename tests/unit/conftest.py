"""Unit-test doubles: an inspectable in-memory cache and domain factories."""

from datetime import date
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.us_card.domain.models import CardInfo
from src.us_user.domain.models import User


class InMemoryProjectionCache:
    """ProjectionCache kept in a dict so tests can inspect and seed entries."""

    def __init__(self) -> None:
        self.store: dict[tuple[str, str], dict[str, Any]] = {}
        self.gets = 0
        self._failures: dict[str, int] = {}

    def fail_next(self, operation: str, times: int = 1) -> None:
        """Make the next `times` calls of `operation` ("put" or "evict") raise."""
        self._failures[operation] = times

    def _maybe_fail(self, operation: str) -> None:
        if self._failures.get(operation, 0) > 0:
            self._failures[operation] -= 1
            raise RedisConnectionError(f"cache {operation} unavailable")

    async def get(self, partition: str, key: str | int) -> dict[str, Any] | None:
        self.gets += 1
        return self.store.get((partition, str(key)))

    async def put(self, partition: str, key: str | int, value: dict[str, Any]) -> None:
        self._maybe_fail("put")
        self.store[(partition, str(key))] = value

    async def evict(self, partition: str, key: str | int) -> None:
        self._maybe_fail("evict")
        self.store.pop((partition, str(key)), None)

    def entry(self, partition: str, key: str | int) -> dict[str, Any] | None:
        return self.store.get((partition, str(key)))


def _make_card(**kwargs: Any) -> CardInfo:
    defaults: dict[str, Any] = dict(
        id=10,
        user_id=1,
        number="1234567812345678",
        holder="Test Holder",
        expiration_date="12/30",
    )
    defaults.update(kwargs)
    return CardInfo(**defaults)


def _make_user(**kwargs: Any) -> User:
    defaults: dict[str, Any] = dict(
        id=1,
        name="Max",
        surname="Ivanov",
        birth_date=date(1995, 10, 17),
        email="max@gmail.com",
        credentials_id=100,
        cards=[],
    )
    defaults.update(kwargs)
    return User(**defaults)


@pytest.fixture
def cache() -> InMemoryProjectionCache:
    return InMemoryProjectionCache()


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def user_repo() -> MagicMock:
    repo = MagicMock()
    for name in (
        "get_by_id",
        "get_by_email",
        "get_by_credentials_id",
        "exists_by_email",
        "list_by_ids",
        "list_all",
        "insert",
        "update",
        "delete",
    ):
        setattr(repo, name, AsyncMock())
    return repo


@pytest.fixture
def card_repo() -> MagicMock:
    repo = MagicMock()
    for name in (
        "get_by_id",
        "exists_by_number",
        "list_by_ids",
        "list_by_user_id",
        "insert",
        "update",
        "delete",
    ):
        setattr(repo, name, AsyncMock())
    return repo


@pytest.fixture
def make_user() -> Any:
    return _make_user


@pytest.fixture
def make_card() -> Any:
    return _make_card
