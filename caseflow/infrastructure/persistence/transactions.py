"""Unit of work over an AsyncSession: savepoints and backend-level locks."""

import zlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


class SqlAlchemyUnitOfWork:
    """Transaction helpers for use cases. Implements IUnitOfWork."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Run the block in a SAVEPOINT; an exception rolls back only the block."""
        async with self.db.begin_nested():
            yield

    async def lock(self, name: str) -> None:
        """Take a transaction-scoped named lock.

        PostgreSQL: pg_advisory_xact_lock keyed by a CRC32 of the name,
        released at commit or rollback. Other backends serialise writers at
        the database level already, so this is a no-op there.
        """
        bind = self.db.get_bind()
        if bind.dialect.name != "postgresql":
            return
        key = zlib.crc32(name.encode("utf-8"))
        await self.db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"), {"key": key}
        )
