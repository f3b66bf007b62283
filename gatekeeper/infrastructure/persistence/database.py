"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Engine and session factory are created lazily on first use (get_db /
get_db_transactional / get_session_factory) so import does not trigger
Settings validation. Tests and scripts may call configure_engine() with an
explicit URL (e.g. sqlite+aiosqlite) before first use.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from gatekeeper.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() / configure_engine(); avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def configure_engine(database_url: str, **engine_kwargs: Any) -> AsyncEngine:
    """Create the engine and AsyncSessionLocal for database_url (replaces any previous)."""
    global engine, AsyncSessionLocal
    settings = get_settings()
    kwargs: dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}
    # SQLite (tests, local dev) does not accept pool sizing or server settings.
    if not database_url.startswith("sqlite"):
        kwargs["pool_size"] = settings.db_pool_size if settings.db_pool_size is not None else 20
        kwargs["max_overflow"] = (
            settings.db_max_overflow if settings.db_max_overflow is not None else 30
        )
        kwargs["pool_recycle"] = 3600
        if "postgresql" in database_url:
            kwargs["connect_args"] = {
                "command_timeout": settings.db_command_timeout or 60,
                "server_settings": {"jit": "off"},
            }
    kwargs.update(engine_kwargs)
    engine = create_async_engine(database_url, **kwargs)
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return engine


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal from settings on first use."""
    if AsyncSessionLocal is not None:
        return
    configure_engine(get_settings().database_url)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory used by background workers (audit sink, outbox)."""
    _ensure_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


async def dispose_engine() -> None:
    """Dispose the engine and forget the session factory (shutdown, tests)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None


async def create_all() -> None:
    """Create all tables (local development and tests; production uses migrations)."""
    _ensure_engine()
    assert engine is not None
    from gatekeeper.infrastructure.persistence import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """Database session dependency for read operations.

    Does not commit; use get_db_transactional for writes.
    Yields a session and closes it on exit.
    """
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_db_transactional():
    """Database session dependency for write operations.

    The yielded session is also the request's unit of work: services commit
    it before the endpoint builds its response, so a failed commit becomes
    an error response. Teardown of a yield dependency runs after the
    response has been sent, so it never commits; it rolls back whatever is
    still uncommitted (exception, cancellation from TimeoutMiddleware).
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()
