"""Pydantic request/response schemas for us_card.

Wire format (camelCase):
  CardInfoRequest:  {number, holder, expirationDate}
  CardInfoResponse: {id, userId, number, holder, expirationDate}

The owner is never part of the request: it is resolved from the caller's
credentials id when the card is created.
"""

import re

from pydantic import Field, field_validator

from src.us_card.domain.models import CardInfo
from src.us_common.schemas import CamelModel

_NUMBER_RE = re.compile(r"\d{16}")
_EXPIRATION_RE = re.compile(r"(0[1-9]|1[0-2])/\d{2}")


class CardInfoRequest(CamelModel):
    number: str
    holder: str = Field(..., max_length=100)
    expiration_date: str

    @field_validator("number")
    @classmethod
    def number_is_16_digits(cls, v: str) -> str:
        if not _NUMBER_RE.fullmatch(v):
            raise ValueError("Card number must be 16 digits")
        return v

    @field_validator("holder")
    @classmethod
    def holder_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Holder is required")
        return v

    @field_validator("expiration_date")
    @classmethod
    def expiration_is_mm_yy(cls, v: str) -> str:
        if not _EXPIRATION_RE.fullmatch(v):
            raise ValueError("Expiration date format MM/yy")
        return v


class CardInfoResponse(CamelModel):
    id: int
    user_id: int
    number: str
    holder: str
    expiration_date: str

    @classmethod
    def from_domain(cls, card: CardInfo) -> "CardInfoResponse":
        return cls(
            id=card.id,
            user_id=card.user_id,
            number=card.number,
            holder=card.holder,
            expiration_date=card.expiration_date,
        )
