"""SQLAlchemy ORM model for the card_info table.

Table is created by Alembic migration: alembic/versions/002_create_card_info.py
The FK carries ON DELETE CASCADE, so deleting a user removes its cards in
the same statement.
"""

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.us_common.database import Base

if TYPE_CHECKING:
    from src.us_user.infrastructure.db_models import UserORM

UQ_CARD_INFO_NUMBER = "uq_card_info_number"


class CardInfoORM(Base):
    __tablename__ = "card_info"
    __table_args__ = (
        UniqueConstraint("number", name=UQ_CARD_INFO_NUMBER),
        Index("idx_card_info_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE", name="fk_card_info_user"),
        nullable=False,
    )
    number: Mapped[str] = mapped_column(String(16), nullable=False)
    holder: Mapped[str] = mapped_column(String(100), nullable=False)
    expiration_date: Mapped[str] = mapped_column(String(5), nullable=False)

    user: Mapped["UserORM"] = relationship(back_populates="cards")
