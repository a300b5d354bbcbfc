"""
Base repository with common query helpers.

Provides generic database operations for feature repositories.
Uses SQLAlchemy async session for non-blocking database access.

Usage:
    class WorkoutRepository(BaseRepository[Workout]):
        def __init__(self, db: AsyncSession):
            super().__init__(db, Workout)

        async def get_by_provider_id(self, provider_id: str) -> Workout | None:
            return await self.get_by(provider_id=provider_id)
"""

from typing import TypeVar, Generic, Type
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository for database operations.

    All methods are async for use with AsyncSession. Nothing here commits:
    transaction boundaries belong to the caller.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        """
        Initialize repository.

        Args:
            db: Async database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def _filtered(self, query, **kwargs):
        for key, value in kwargs.items():
            query = query.where(getattr(self.model, key) == value)
        return query

    async def get_by(self, **kwargs) -> T | None:
        """
        Get single entity by arbitrary field values.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            First matching entity or None
        """
        result = await self.db.execute(self._filtered(select(self.model), **kwargs))
        return result.scalar_one_or_none()

    async def get_all(self, **kwargs) -> list[T]:
        """
        Get all entities matching criteria.

        Args:
            **kwargs: Field name-value pairs to filter by

        Returns:
            List of matching entities (order unspecified)
        """
        result = await self.db.execute(self._filtered(select(self.model), **kwargs))
        return list(result.scalars().all())

    async def create(self, **kwargs) -> T:
        """
        Create new entity and flush it so its ID is assigned.

        Args:
            **kwargs: Field values for new entity

        Returns:
            Created entity
        """
        entity = self.model(**kwargs)
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def count(self, **kwargs) -> int:
        """Count entities matching criteria."""
        query = self._filtered(select(func.count()).select_from(self.model), **kwargs)
        result = await self.db.execute(query)
        return result.scalar() or 0
