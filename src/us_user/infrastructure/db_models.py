"""SQLAlchemy ORM model for the users table.

Table is created by Alembic migration: alembic/versions/001_create_users.py
"""

from datetime import date, datetime

from sqlalchemy import BigInteger, Date, DateTime, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.us_card.infrastructure.db_models import CardInfoORM
from src.us_common.database import Base

# Names as created by the migration; used to tell UNIQUE violations apart
UQ_USERS_EMAIL = "uq_users_email"
UQ_USERS_CREDENTIALS_ID = "uq_users_credentials_id"


class UserORM(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name=UQ_USERS_EMAIL),
        UniqueConstraint("credentials_id", name=UQ_USERS_CREDENTIALS_ID),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    surname: Mapped[str | None] = mapped_column(String(50))
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    credentials_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )

    # DB-level ON DELETE CASCADE does the work; passive_deletes skips loading children
    cards: Mapped[list[CardInfoORM]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=CardInfoORM.id,
    )
