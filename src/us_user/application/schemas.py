"""Pydantic request/response schemas for us_user.

Wire format (camelCase):
  UserRequest:  {name, surname?, birthDate, email}
  UserResponse: {id, name, surname, birthDate, email, cards: [CardInfoResponse]}

UserResponse is also the value stored in the `users` and `usersByEmail`
cache partitions, so every field here must survive a JSON round-trip.
"""

from datetime import date

from pydantic import EmailStr, Field, field_validator

from src.us_card.application.schemas import CardInfoResponse
from src.us_common.datetime_utils import utc_today
from src.us_common.schemas import CamelModel
from src.us_user.domain.models import User


class UserRequest(CamelModel):
    name: str = Field(..., max_length=50)
    surname: str | None = Field(None, max_length=50)
    birth_date: date
    email: EmailStr

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v

    @field_validator("birth_date")
    @classmethod
    def birth_date_not_in_future(cls, v: date) -> date:
        if v > utc_today():
            raise ValueError("Birth date can't be in the future")
        return v


class UserResponse(CamelModel):
    id: int
    name: str
    surname: str | None
    birth_date: date
    email: str
    cards: list[CardInfoResponse] = []

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            surname=user.surname,
            birth_date=user.birth_date,
            email=user.email,
            cards=[CardInfoResponse.from_domain(c) for c in user.cards],
        )
