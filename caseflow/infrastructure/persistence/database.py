"""Async SQLAlchemy engine, sessions and the declarative Base.

Tables are owned by the Alembic migrations next to this module. Production
runs on postgresql+asyncpg; local runs and tests use sqlite+aiosqlite.
Nothing here reads settings at import time: the process-wide engine is
built the first time a session or the engine itself is requested.
"""

import logging
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from caseflow.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 20
DEFAULT_MAX_OVERFLOW = 30
DEFAULT_COMMAND_TIMEOUT = 60
POOL_RECYCLE_SECONDS = 3600


class Base(DeclarativeBase):
    pass


def enable_sqlite_savepoints(async_engine: AsyncEngine) -> None:
    """Make SAVEPOINT work on pysqlite.

    The driver opens and commits transactions behind SQLAlchemy's back,
    which breaks ``begin_nested``. Disabling that and emitting BEGIN from
    the engine hands control back to SQLAlchemy.
    """
    sync_engine = async_engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def _driver_autocommit(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(sync_engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def _pool_options(settings: Settings, database_url: str) -> dict[str, Any]:
    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_recycle": POOL_RECYCLE_SECONDS,
        "pool_size": settings.db_pool_size or DEFAULT_POOL_SIZE,
        "max_overflow": settings.db_max_overflow or DEFAULT_MAX_OVERFLOW,
    }
    if database_url.startswith("postgresql"):
        options["connect_args"] = {
            "command_timeout": settings.db_command_timeout or DEFAULT_COMMAND_TIMEOUT
        }
    return options


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Engine for ``database_url``; SQLite gets savepoint support instead of pool tuning."""
    if database_url.startswith("sqlite"):
        async_engine = create_async_engine(database_url, echo=echo)
        enable_sqlite_savepoints(async_engine)
        return async_engine
    return create_async_engine(
        database_url, echo=echo, **_pool_options(get_settings(), database_url)
    )


def build_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


class _SharedDatabase:
    """Lazily built engine and session factory for the running process."""

    def __init__(self) -> None:
        self.engine: AsyncEngine | None = None
        self.sessions: async_sessionmaker[AsyncSession] | None = None

    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self.sessions is None:
            settings = get_settings()
            self.engine = build_engine(settings.database_url, echo=settings.database_echo)
            self.sessions = build_session_factory(self.engine)
            logger.info("Connected engine for %s", self.engine.url.get_backend_name())
        return self.sessions

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Engine connections released")
        self.engine = None
        self.sessions = None


_shared = _SharedDatabase()


def get_engine() -> AsyncEngine:
    _shared.session_factory()
    assert _shared.engine is not None
    return _shared.engine


async def dispose_engine() -> None:
    await _shared.close()


async def get_db() -> AsyncIterator[AsyncSession]:
    """Session for read-only routes; never commits."""
    async with _shared.session_factory()() as session:
        yield session


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """Session wrapped in one transaction: committed when the route returns, rolled back if it raises."""
    async with _shared.session_factory()() as session:
        async with session.begin():
            yield session
