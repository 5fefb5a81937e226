"""Base repository: lookup by id and versioned flush (optimistic lock)."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from caseflow.domain.exceptions import ConflictRetryException, ResourceNotFoundException
from caseflow.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, load-for-update and versioned flush.

    Rows loaded for update always refresh from the database
    (populate_existing), so a retry after a conflict sees the winner's
    version. A flush whose versioned UPDATE matched no row raises
    ConflictRetryException. First-time inserts guarded by a unique key go
    through _insert_unique, so the loser of two concurrent inserts gets the
    same ConflictRetryException instead of an IntegrityError.
    """

    entity_type: str = "entity"

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _load_for_update(
        self, entity_id: str, expected_version: int | None = None
    ) -> ModelType:
        """Load the current row; raise if missing or not at expected_version."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        obj = result.scalar_one_or_none()
        if obj is None:
            raise ResourceNotFoundException(self.entity_type, entity_id)
        if expected_version is not None and getattr(obj, "version") != expected_version:
            raise ConflictRetryException(self.entity_type, entity_id)
        return obj

    async def _flush_versioned(self, entity_id: str | None = None) -> None:
        """Flush pending changes; a lost version race becomes ConflictRetryException."""
        try:
            await self.db.flush()
        except StaleDataError as e:
            raise ConflictRetryException(self.entity_type, entity_id) from e

    async def _insert_unique(self, obj: ModelType, entity_id: str | None = None) -> None:
        """Add and flush obj in a savepoint; a unique-key collision becomes ConflictRetryException."""
        try:
            async with self.db.begin_nested():
                self.db.add(obj)
                await self.db.flush()
        except IntegrityError as e:
            raise ConflictRetryException(self.entity_type, entity_id) from e
