"""CardApplicationService: payment cards with ownership checks and caching.

A card's owner is its user's credentials id; every mutating call resolves
card → user → credentials id before touching anything else.

Cache discipline:
  get_by_id   cards::{id} read-through, 30 min TTL
  create      no card cache write
  update      cards::{id} evicted before commit, refreshed after it
  delete      cards::{id} evicted before and after commit
Any card write also evicts the owner's users::{id} and usersByEmail::{email}
entries (the cached UserResponse embeds the user's cards). Evictions run
inside the write transaction, so a Redis failure rolls the write back.
"""

import logging
from dataclasses import replace

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_card.application.schemas import CardInfoRequest, CardInfoResponse
from src.us_card.domain.models import CardInfo
from src.us_card.domain.repository import CardRepositoryProtocol
from src.us_card.infrastructure.persistence import CardRepository
from src.us_common.cache import (
    CARDS,
    USERS,
    USERS_BY_EMAIL,
    CacheKey,
    ProjectionCache,
    RedisProjectionCache,
    evict_all,
    evict_all_quietly,
    put_quietly,
)
from src.us_common.database import is_foreign_key_violation, write_unit
from src.us_common.errors import AlreadyExistsError, card_not_found, user_credentials_not_found
from src.us_gateway.auth.ownership import DELETE_OWN_CARDS, UPDATE_OWN_CARDS, ensure_owner
from src.us_user.domain.models import User
from src.us_user.domain.repository import UserRepositoryProtocol
from src.us_user.infrastructure.persistence import UserRepository

logger = logging.getLogger(__name__)


def _number_conflict(number: str) -> str:
    return f"Card number '{number}' already exists"


def _owner_keys(owner: User) -> list[CacheKey]:
    """The owner's user projections, which embed the card list."""
    return [(USERS, owner.id), (USERS_BY_EMAIL, owner.email)]


class CardApplicationService:
    def __init__(
        self,
        repo: CardRepositoryProtocol | None = None,
        user_repo: UserRepositoryProtocol | None = None,
        cache: ProjectionCache | None = None,
    ) -> None:
        self._repo: CardRepositoryProtocol = repo or CardRepository()
        self._user_repo: UserRepositoryProtocol = user_repo or UserRepository()
        self._cache: ProjectionCache = cache or RedisProjectionCache()

    async def create(
        self, db: AsyncSession, body: CardInfoRequest, credentials_id: int
    ) -> CardInfoResponse:
        async with write_unit(db, _number_conflict(body.number)):
            owner = await self._user_repo.get_by_credentials_id(db, credentials_id)
            if owner is None:
                raise user_credentials_not_found(credentials_id)
            if await self._repo.exists_by_number(db, body.number):
                raise AlreadyExistsError(_number_conflict(body.number))
            try:
                card = await self._repo.insert(
                    db,
                    user_id=owner.id,
                    number=body.number,
                    holder=body.holder,
                    expiration_date=body.expiration_date,
                )
            except IntegrityError as exc:
                # Owner deleted by a concurrent transaction since the lookup above
                if is_foreign_key_violation(exc):
                    raise user_credentials_not_found(credentials_id) from None
                raise
            await evict_all(self._cache, _owner_keys(owner))

        await evict_all_quietly(self._cache, _owner_keys(owner))
        logger.info("Card created: id=%s user_id=%s", card.id, owner.id)
        return CardInfoResponse.from_domain(card)

    async def update(
        self,
        db: AsyncSession,
        card_id: int,
        body: CardInfoRequest,
        credentials_id: int,
    ) -> CardInfoResponse:
        async with write_unit(db, _number_conflict(body.number)):
            card, owner = await self._require_owned(db, card_id, credentials_id, UPDATE_OWN_CARDS)

            if body.number != card.number and await self._repo.exists_by_number(db, body.number):
                raise AlreadyExistsError(_number_conflict(body.number))

            updated = await self._repo.update(
                db,
                replace(
                    card,
                    number=body.number,
                    holder=body.holder,
                    expiration_date=body.expiration_date,
                ),
            )
            await evict_all(self._cache, [(CARDS, card_id), *_owner_keys(owner)])

        resp = CardInfoResponse.from_domain(updated)
        await put_quietly(self._cache, CARDS, card_id, resp.to_cache())
        await evict_all_quietly(self._cache, _owner_keys(owner))
        logger.info("Card updated: id=%s", card_id)
        return resp

    async def delete(self, db: AsyncSession, card_id: int, credentials_id: int) -> None:
        async with write_unit(db):
            _, owner = await self._require_owned(db, card_id, credentials_id, DELETE_OWN_CARDS)
            await self._repo.delete(db, card_id)
            stale = [(CARDS, card_id), *_owner_keys(owner)]
            await evict_all(self._cache, stale)

        await evict_all_quietly(self._cache, stale)
        logger.info("Card deleted: id=%s", card_id)

    async def get_by_id(self, db: AsyncSession, card_id: int) -> CardInfoResponse:
        cached = await self._cache.get(CARDS, card_id)
        if cached is not None:
            return CardInfoResponse.model_validate(cached)

        card = await self._repo.get_by_id(db, card_id)
        if card is None:
            raise card_not_found(card_id)
        resp = CardInfoResponse.from_domain(card)
        await self._cache.put(CARDS, card_id, resp.to_cache())
        return resp

    async def get_all_by_ids(
        self, db: AsyncSession, card_ids: list[int]
    ) -> list[CardInfoResponse]:
        cards = await self._repo.list_by_ids(db, card_ids)
        return [CardInfoResponse.from_domain(c) for c in cards]

    async def get_by_user_id(self, db: AsyncSession, user_id: int) -> list[CardInfoResponse]:
        cards = await self._repo.list_by_user_id(db, user_id)
        return [CardInfoResponse.from_domain(c) for c in cards]

    async def _require_owned(
        self,
        db: AsyncSession,
        card_id: int,
        credentials_id: int,
        action: str,
    ) -> tuple[CardInfo, User]:
        """Existence first (404), then ownership (403)."""
        card = await self._repo.get_by_id(db, card_id)
        if card is None:
            raise card_not_found(card_id)
        owner = await self._user_repo.get_by_id(db, card.user_id)
        if owner is None:
            raise card_not_found(card_id)
        ensure_owner(credentials_id, owner.credentials_id, action)
        return card, owner
