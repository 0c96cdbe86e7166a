"""Domain models for us_user. Plain dataclasses, no SQLAlchemy."""

from dataclasses import dataclass, field
from datetime import date

from src.us_card.domain.models import CardInfo


@dataclass
class User:
    id: int
    name: str
    surname: str | None
    birth_date: date
    email: str               # globally unique
    credentials_id: int      # owning credential, set once at creation
    cards: list[CardInfo] = field(default_factory=list)
