"""Domain models for us_card. Plain dataclasses, no SQLAlchemy."""

from dataclasses import dataclass


@dataclass
class CardInfo:
    id: int
    user_id: int             # owning users.id, never null
    number: str              # 16 digits, globally unique
    holder: str
    expiration_date: str     # "MM/yy"
