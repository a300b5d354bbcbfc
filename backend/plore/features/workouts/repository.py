"""
Workout repositories.

Data access layer for workouts, their route points and key-value slots.
"""

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from plore.shared.repository import BaseRepository
from plore.shared.timeutils import to_db
from .models import Workout, RoutePoint, KeyValue
from .types import LocationSample, WorkoutRecord

logger = logging.getLogger(__name__)


class WorkoutRepository(BaseRepository[Workout]):
    """
    Repository for synced workouts.

    Merge policy: find-or-create by provider_id, then last writer wins per
    field. Route points are de-duplicated by timestamp within a workout, so
    re-processing the same workout does not duplicate samples.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, Workout)

    async def get_by_provider_id(self, provider_id: str) -> Workout | None:
        return await self.get_by(provider_id=provider_id)

    async def find_or_create_workout(self, record: WorkoutRecord) -> Workout:
        """
        Get the workout for a provider record, creating it if missing.

        Args:
            record: Workout metadata from the provider

        Returns:
            Persistent Workout with up-to-date fields
        """
        workout = await self.get_by_provider_id(record.provider_id)

        if workout is None:
            return await self.create(
                provider_id=record.provider_id,
                activity_type=record.activity_kind.value,
                start_date=to_db(record.start_date),
                indoor=record.indoor,
                route_points=[],
            )

        workout.activity_type = record.activity_kind.value
        workout.start_date = to_db(record.start_date)
        workout.indoor = record.indoor
        return workout

    async def append_route_points(
        self,
        workout: Workout,
        samples: Sequence[LocationSample]
    ) -> int:
        """
        Attach simplified samples to a workout.

        Samples whose timestamp is already stored for this workout are skipped.

        Returns:
            Number of points added
        """
        seen = {point.timestamp for point in workout.route_points}
        added = 0

        for sample in samples:
            timestamp = to_db(sample.timestamp)
            if timestamp in seen:
                continue
            seen.add(timestamp)
            workout.route_points.append(
                RoutePoint(
                    latitude=sample.latitude,
                    longitude=sample.longitude,
                    timestamp=timestamp,
                )
            )
            added += 1

        if added:
            await self.db.flush()
        return added

    async def fetch_all_workouts(self) -> list[Workout]:
        """All persisted workouts with their points (order unspecified)."""
        result = await self.db.execute(
            select(Workout).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count_workouts(self) -> int:
        return await self.count()

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()


class KeyValueRepository(BaseRepository[KeyValue]):
    """Repository for named durable slots."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, KeyValue)

    async def get_value(self, key: str) -> str | None:
        entry = await self.get_by(key=key)
        return entry.value if entry else None

    async def set_value(self, key: str, value: str) -> KeyValue:
        entry = await self.get_by(key=key)
        if entry is None:
            return await self.create(key=key, value=value)
        entry.value = value
        await self.db.flush()
        return entry
