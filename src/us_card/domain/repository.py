"""Repository Protocol for cards.

Unit tests inject a mock that conforms to this Protocol;
infrastructure/persistence.py provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.us_card.domain.models import CardInfo


class CardRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, card_id: int) -> CardInfo | None: ...

    async def exists_by_number(self, db: AsyncSession, number: str) -> bool: ...

    async def list_by_ids(self, db: AsyncSession, card_ids: list[int]) -> list[CardInfo]: ...

    async def list_by_user_id(self, db: AsyncSession, user_id: int) -> list[CardInfo]: ...

    async def insert(
        self,
        db: AsyncSession,
        user_id: int,
        number: str,
        holder: str,
        expiration_date: str,
    ) -> CardInfo: ...

    async def update(self, db: AsyncSession, card: CardInfo) -> CardInfo: ...

    async def delete(self, db: AsyncSession, card_id: int) -> None: ...
