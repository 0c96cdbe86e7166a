"""UserApplicationService: users with ownership checks and a read-through cache.

Transactions: every write runs inside `write_unit(db)` (commit on success,
rollback on error). Stale cache keys are evicted inside that unit, before
the commit, so a Redis failure aborts the write instead of leaving a stale
projection behind. After the commit the projection is refreshed (or the
keys evicted again) on a best-effort basis.

Cache discipline:
  get_by_id        users::{id}           read-through, 30 min TTL
  get_by_email     usersByEmail::{email} read-through, 30 min TTL
  create           no cache write
  update           users::{id} + usersByEmail::{old email} evicted before
                   commit; users::{id} refreshed after it
  delete           users::{id}, usersByEmail::{email}, cards::{card_id} of
                   every cascaded card evicted before and after commit
"""

import logging
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from src.us_common.cache import (
    CARDS,
    USERS,
    USERS_BY_EMAIL,
    ProjectionCache,
    RedisProjectionCache,
    evict_all,
    evict_all_quietly,
    put_quietly,
)
from src.us_common.database import write_unit
from src.us_common.errors import (
    AlreadyExistsError,
    user_credentials_not_found,
    user_email_not_found,
    user_not_found,
)
from src.us_gateway.auth.ownership import DELETE_OWN_PROFILE, UPDATE_OWN_PROFILE, ensure_owner
from src.us_user.application.schemas import UserRequest, UserResponse
from src.us_user.domain.models import User
from src.us_user.domain.repository import UserRepositoryProtocol
from src.us_user.infrastructure.db_models import UQ_USERS_CREDENTIALS_ID, UQ_USERS_EMAIL
from src.us_user.infrastructure.persistence import UserRepository

logger = logging.getLogger(__name__)


class UserApplicationService:
    def __init__(
        self,
        repo: UserRepositoryProtocol | None = None,
        cache: ProjectionCache | None = None,
    ) -> None:
        self._repo: UserRepositoryProtocol = repo or UserRepository()
        self._cache: ProjectionCache = cache or RedisProjectionCache()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self, db: AsyncSession, body: UserRequest, credentials_id: int
    ) -> UserResponse:
        """Register the caller's user record; the caller becomes its owner."""
        email_taken = f"User with email '{body.email}' already exists"
        credentials_taken = f"User with credentials id={credentials_id} already exists"
        conflicts = {UQ_USERS_EMAIL: email_taken, UQ_USERS_CREDENTIALS_ID: credentials_taken}
        async with write_unit(db, email_taken, conflicts):
            if await self._repo.exists_by_email(db, body.email):
                raise AlreadyExistsError(email_taken)
            if await self._repo.get_by_credentials_id(db, credentials_id) is not None:
                raise AlreadyExistsError(credentials_taken)
            user = await self._repo.insert(
                db,
                name=body.name,
                surname=body.surname,
                birth_date=body.birth_date,
                email=body.email,
                credentials_id=credentials_id,
            )

        logger.info("User created: id=%s credentials_id=%s", user.id, credentials_id)
        return UserResponse.from_domain(user)

    async def update(
        self,
        db: AsyncSession,
        user_id: int,
        body: UserRequest,
        credentials_id: int,
    ) -> UserResponse:
        conflict = f"Email '{body.email}' already in use"
        async with write_unit(db, conflict, {UQ_USERS_EMAIL: conflict}):
            user = await self._require(db, user_id)
            ensure_owner(credentials_id, user.credentials_id, UPDATE_OWN_PROFILE)

            if body.email != user.email and await self._repo.exists_by_email(db, body.email):
                raise AlreadyExistsError(conflict)

            updated = await self._repo.update(
                db,
                replace(
                    user,
                    name=body.name,
                    surname=body.surname,
                    birth_date=body.birth_date,
                    email=body.email,
                ),
            )
            stale = [(USERS, user_id), (USERS_BY_EMAIL, user.email)]
            await evict_all(self._cache, stale)

        resp = UserResponse.from_domain(updated)
        await put_quietly(self._cache, USERS, user_id, resp.to_cache())
        # The new email is not pre-cached; the first read will populate it
        await evict_all_quietly(self._cache, [(USERS_BY_EMAIL, user.email)])
        logger.info("User updated: id=%s", user_id)
        return resp

    async def delete(self, db: AsyncSession, user_id: int, credentials_id: int) -> None:
        async with write_unit(db):
            user = await self._require(db, user_id)
            ensure_owner(credentials_id, user.credentials_id, DELETE_OWN_PROFILE)
            await self._repo.delete(db, user_id)
            stale = [(USERS, user_id), (USERS_BY_EMAIL, user.email)]
            stale += [(CARDS, card.id) for card in user.cards]
            await evict_all(self._cache, stale)

        await evict_all_quietly(self._cache, stale)
        logger.info("User deleted: id=%s cascaded_cards=%d", user_id, len(user.cards))

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    async def get_by_id(self, db: AsyncSession, user_id: int) -> UserResponse:
        cached = await self._cache.get(USERS, user_id)
        if cached is not None:
            return UserResponse.model_validate(cached)

        user = await self._repo.get_by_id(db, user_id)
        if user is None:
            raise user_not_found(user_id)
        resp = UserResponse.from_domain(user)
        await self._cache.put(USERS, user_id, resp.to_cache())
        return resp

    async def get_by_email(self, db: AsyncSession, email: str) -> UserResponse:
        cached = await self._cache.get(USERS_BY_EMAIL, email)
        if cached is not None:
            return UserResponse.model_validate(cached)

        user = await self._repo.get_by_email(db, email)
        if user is None:
            raise user_email_not_found(email)
        resp = UserResponse.from_domain(user)
        await self._cache.put(USERS_BY_EMAIL, email, resp.to_cache())
        return resp

    # ------------------------------------------------------------------
    # Uncached reads
    # ------------------------------------------------------------------

    async def get_by_credentials_id(
        self, db: AsyncSession, credentials_id: int
    ) -> UserResponse:
        user = await self._repo.get_by_credentials_id(db, credentials_id)
        if user is None:
            raise user_credentials_not_found(credentials_id)
        return UserResponse.from_domain(user)

    async def get_all_by_ids(self, db: AsyncSession, user_ids: list[int]) -> list[UserResponse]:
        """Bulk lookup; ids that do not exist are silently skipped."""
        users = await self._repo.list_by_ids(db, user_ids)
        return [UserResponse.from_domain(u) for u in users]

    async def get_all(self, db: AsyncSession) -> list[UserResponse]:
        users = await self._repo.list_all(db)
        return [UserResponse.from_domain(u) for u in users]

    async def _require(self, db: AsyncSession, user_id: int) -> User:
        user = await self._repo.get_by_id(db, user_id)
        if user is None:
            raise user_not_found(user_id)
        return user
