"""UserRepository: SQLAlchemy implementation of UserRepositoryProtocol.

Every single-user read eagerly loads the user's cards (selectinload), since
the UserResponse projection nests them and async sessions cannot lazy-load.
"""

from datetime import date

from sqlalchemy import ColumnElement, delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.us_card.infrastructure.persistence import card_row_to_domain
from src.us_user.domain.models import User
from src.us_user.infrastructure.db_models import UserORM

_SELECT_USER = select(UserORM).options(selectinload(UserORM.cards))


def _row_to_user(row: UserORM) -> User:
    return User(
        id=row.id,
        name=row.name,
        surname=row.surname,
        birth_date=row.birth_date,
        email=row.email,
        credentials_id=row.credentials_id,
        cards=[card_row_to_domain(card) for card in row.cards],
    )


class UserRepository:
    async def _one(self, db: AsyncSession, criterion: ColumnElement[bool]) -> User | None:
        result = await db.execute(_SELECT_USER.where(criterion))
        row = result.scalar_one_or_none()
        return _row_to_user(row) if row else None

    async def get_by_id(self, db: AsyncSession, user_id: int) -> User | None:
        return await self._one(db, UserORM.id == user_id)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        return await self._one(db, UserORM.email == email)

    async def get_by_credentials_id(
        self, db: AsyncSession, credentials_id: int
    ) -> User | None:
        return await self._one(db, UserORM.credentials_id == credentials_id)

    async def exists_by_email(self, db: AsyncSession, email: str) -> bool:
        found = await db.scalar(select(exists().where(UserORM.email == email)))
        return bool(found)

    async def list_by_ids(self, db: AsyncSession, user_ids: list[int]) -> list[User]:
        if not user_ids:
            return []
        result = await db.execute(
            _SELECT_USER.where(UserORM.id.in_(user_ids)).order_by(UserORM.id)
        )
        return [_row_to_user(row) for row in result.scalars().all()]

    async def list_all(self, db: AsyncSession) -> list[User]:
        result = await db.execute(_SELECT_USER.order_by(UserORM.id))
        return [_row_to_user(row) for row in result.scalars().all()]

    async def insert(
        self,
        db: AsyncSession,
        name: str,
        surname: str | None,
        birth_date: date,
        email: str,
        credentials_id: int,
    ) -> User:
        row = UserORM(
            name=name,
            surname=surname,
            birth_date=birth_date,
            email=email,
            credentials_id=credentials_id,
        )
        db.add(row)
        await db.flush()  # Get row.id without committing
        # A fresh user has no cards; touching row.cards would trigger a lazy load
        return User(
            id=row.id,
            name=name,
            surname=surname,
            birth_date=birth_date,
            email=email,
            credentials_id=credentials_id,
            cards=[],
        )

    async def update(self, db: AsyncSession, user: User) -> User:
        # credentials_id is never written: ownership is fixed at creation
        await db.execute(
            update(UserORM)
            .where(UserORM.id == user.id)
            .values(
                name=user.name,
                surname=user.surname,
                birth_date=user.birth_date,
                email=user.email,
            )
        )
        return user

    async def delete(self, db: AsyncSession, user_id: int) -> None:
        # card_info rows go with it via ON DELETE CASCADE
        await db.execute(delete(UserORM).where(UserORM.id == user_id))
