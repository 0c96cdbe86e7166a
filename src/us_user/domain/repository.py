"""Repository Protocol for users."""

from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.us_user.domain.models import User


class UserRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, user_id: int) -> User | None: ...

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None: ...

    async def get_by_credentials_id(
        self, db: AsyncSession, credentials_id: int
    ) -> User | None: ...

    async def exists_by_email(self, db: AsyncSession, email: str) -> bool: ...

    async def list_by_ids(self, db: AsyncSession, user_ids: list[int]) -> list[User]: ...

    async def list_all(self, db: AsyncSession) -> list[User]: ...

    async def insert(
        self,
        db: AsyncSession,
        name: str,
        surname: str | None,
        birth_date: date,
        email: str,
        credentials_id: int,
    ) -> User: ...

    async def update(self, db: AsyncSession, user: User) -> User: ...

    async def delete(self, db: AsyncSession, user_id: int) -> None: ...
