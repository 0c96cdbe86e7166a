"""CardRepository: SQLAlchemy implementation of CardRepositoryProtocol.

Reads use ORM select(); updates and deletes are single bulk statements
so they never touch the lazy `user` relationship.
"""

from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_card.domain.models import CardInfo
from src.us_card.infrastructure.db_models import CardInfoORM

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def card_row_to_domain(row: CardInfoORM) -> CardInfo:
    return CardInfo(
        id=row.id,
        user_id=row.user_id,
        number=row.number,
        holder=row.holder,
        expiration_date=row.expiration_date,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CardRepository:
    async def get_by_id(self, db: AsyncSession, card_id: int) -> CardInfo | None:
        result = await db.execute(select(CardInfoORM).where(CardInfoORM.id == card_id))
        row = result.scalar_one_or_none()
        return card_row_to_domain(row) if row else None

    async def exists_by_number(self, db: AsyncSession, number: str) -> bool:
        found = await db.scalar(select(exists().where(CardInfoORM.number == number)))
        return bool(found)

    async def list_by_ids(self, db: AsyncSession, card_ids: list[int]) -> list[CardInfo]:
        if not card_ids:
            return []
        result = await db.execute(
            select(CardInfoORM).where(CardInfoORM.id.in_(card_ids)).order_by(CardInfoORM.id)
        )
        return [card_row_to_domain(row) for row in result.scalars().all()]

    async def list_by_user_id(self, db: AsyncSession, user_id: int) -> list[CardInfo]:
        result = await db.execute(
            select(CardInfoORM).where(CardInfoORM.user_id == user_id).order_by(CardInfoORM.id)
        )
        return [card_row_to_domain(row) for row in result.scalars().all()]

    async def insert(
        self,
        db: AsyncSession,
        user_id: int,
        number: str,
        holder: str,
        expiration_date: str,
    ) -> CardInfo:
        row = CardInfoORM(
            user_id=user_id,
            number=number,
            holder=holder,
            expiration_date=expiration_date,
        )
        db.add(row)
        await db.flush()  # Get row.id without committing
        return card_row_to_domain(row)

    async def update(self, db: AsyncSession, card: CardInfo) -> CardInfo:
        # user_id is never written: a card cannot change owner
        await db.execute(
            update(CardInfoORM)
            .where(CardInfoORM.id == card.id)
            .values(
                number=card.number,
                holder=card.holder,
                expiration_date=card.expiration_date,
            )
        )
        return card

    async def delete(self, db: AsyncSession, card_id: int) -> None:
        await db.execute(delete(CardInfoORM).where(CardInfoORM.id == card_id))
