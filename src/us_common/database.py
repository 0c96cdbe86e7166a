from collections.abc import AsyncGenerator, AsyncIterator, Mapping
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.us_common.errors import AlreadyExistsError

_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


class Base(DeclarativeBase):
    """Shared declarative base for the users and card_info mappings."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    pool_timeout=5,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request.

    Services commit their own writes; read-only calls never commit.
    """
    async with async_session_factory() as session:
        yield session


def _sqlstate(exc: IntegrityError) -> str | None:
    return getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for UNIQUE violations; drivers that expose no SQLSTATE count as one."""
    sqlstate = _sqlstate(exc)
    return sqlstate is None or sqlstate == _UNIQUE_VIOLATION


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    return _sqlstate(exc) == _FOREIGN_KEY_VIOLATION


def constraint_name(exc: IntegrityError) -> str | None:
    """Name of the violated constraint, if the driver reports it.

    psycopg exposes it on `orig.diag`; the asyncpg adapter keeps the
    native asyncpg error (which carries `constraint_name`) as `__cause__`.
    """
    orig = exc.orig
    for source in (getattr(orig, "diag", None), orig, getattr(orig, "__cause__", None)):
        name = getattr(source, "constraint_name", None)
        if name:
            return str(name)
    return None


@asynccontextmanager
async def write_unit(
    db: AsyncSession,
    conflict_message: str | None = None,
    conflict_messages: Mapping[str, str] | None = None,
) -> AsyncIterator[AsyncSession]:
    """One atomic read-check-write unit: commit on success, roll back on any error.

    A UNIQUE violation hit by the write (the pre-check lost a race with a
    concurrent writer) surfaces as AlreadyExistsError. The message is looked
    up by constraint name in `conflict_messages`, falling back to
    `conflict_message`.
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if is_unique_violation(exc):
            message = (conflict_messages or {}).get(constraint_name(exc) or "", conflict_message)
            if message is not None:
                raise AlreadyExistsError(message) from None
        raise
    except Exception:
        await db.rollback()
        raise
