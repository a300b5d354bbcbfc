"""
Test helpers: sample/workout builders and a scripted fake provider.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from plore.features.health import HealthProvider, ProviderQueryError
from plore.features.workouts.types import LocationSample, RouteChunk, WorkoutRecord
from plore.shared.constants import ActivityKind


T0 = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)


def sample(lat: float, lon: float, seconds: int = 0) -> LocationSample:
    """LocationSample at T0 + seconds."""
    return LocationSample(latitude=lat, longitude=lon, timestamp=T0 + timedelta(seconds=seconds))


def workout(
    provider_id: str,
    kind: ActivityKind = ActivityKind.RUNNING,
    start: Optional[datetime] = None,
    indoor: bool = False
) -> WorkoutRecord:
    return WorkoutRecord(
        provider_id=provider_id,
        activity_kind=kind,
        start_date=start or T0,
        indoor=indoor,
    )


def straight_line(count: int, step_deg: float = 0.001, start_seconds: int = 0) -> list[LocationSample]:
    """Samples heading north, ~111 m apart for the default step."""
    return [sample(i * step_deg, 0.0, start_seconds + i) for i in range(count)]


class FakeHealthProvider(HealthProvider):
    """
    Scripted in-memory provider.

    Every call is recorded in `calls` so tests can assert on provider load.
    """

    def __init__(self):
        self.authorized = True
        self.workouts: list[WorkoutRecord] = []
        self.routes: dict[str, list[str]] = {}
        self.chunks: dict[str, list[RouteChunk]] = {}
        self.failing_kinds: set[ActivityKind] = set()
        self.failing_route_listings: set[str] = set()
        self.calls: list[tuple] = []

    def add_workout(self, record: WorkoutRecord, *segments: Iterable[LocationSample]):
        """Register a workout with one single-chunk segment per argument."""
        self.workouts.append(record)
        refs = []
        for index, segment in enumerate(segments):
            ref = f"{record.provider_id}-r{index}"
            self.chunks[ref] = [RouteChunk(samples=tuple(segment), done=True)]
            refs.append(ref)
        self.routes[record.provider_id] = refs

    async def authorize(self, types):
        self.calls.append(("authorize", tuple(types)))
        return self.authorized

    async def query_workouts(self, activity_kind, start=None, end=None):
        self.calls.append(("query_workouts", activity_kind, start))
        await asyncio.sleep(0)
        if activity_kind in self.failing_kinds:
            raise ProviderQueryError(f"{activity_kind.value} query failed")
        return [
            w for w in self.workouts
            if w.activity_kind == activity_kind and (start is None or w.start_date >= start)
        ]

    async def query_route_refs(self, workout):
        self.calls.append(("query_route_refs", workout.provider_id))
        await asyncio.sleep(0)
        if workout.provider_id in self.failing_route_listings:
            raise ProviderQueryError(f"route listing for {workout.provider_id} failed")
        return list(self.routes.get(workout.provider_id, []))

    async def query_route_samples(self, route_ref):
        self.calls.append(("query_route_samples", route_ref))
        for chunk in self.chunks.get(route_ref, []):
            await asyncio.sleep(0)
            yield chunk

    def count_calls(self, name: Optional[str] = None) -> int:
        if name is None:
            return len(self.calls)
        return sum(1 for call in self.calls if call[0] == name)


