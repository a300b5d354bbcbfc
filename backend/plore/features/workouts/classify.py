"""
Route classification.

Projects persisted workouts into walking/running/cycling route buckets
for read access by a presentation layer.
"""

import logging
from typing import Iterable

from plore.shared.constants import ActivityKind
from plore.shared.timeutils import as_utc
from .models import Workout
from .types import LocationSample, RouteBuckets

logger = logging.getLogger(__name__)


def workout_route(workout: Workout) -> tuple[LocationSample, ...]:
    """Stored points of a workout, sorted by timestamp."""
    points = sorted(workout.route_points, key=lambda p: p.timestamp)
    return tuple(
        LocationSample(
            latitude=p.latitude,
            longitude=p.longitude,
            timestamp=as_utc(p.timestamp),
        )
        for p in points
    )


def classify(workouts: Iterable[Workout]) -> RouteBuckets:
    """
    Group persisted workouts into route buckets.

    A workout whose activity type cannot be parsed is skipped with a
    warning; it never fails the whole call. Kind `other` belongs to no
    bucket.
    """
    buckets: dict[ActivityKind, list[tuple[LocationSample, ...]]] = {
        ActivityKind.WALKING: [],
        ActivityKind.RUNNING: [],
        ActivityKind.CYCLING: [],
    }

    for workout in workouts:
        if not workout.activity_type:
            logger.warning(f"Workout {workout.provider_id} has no activity type, skipping")
            continue

        try:
            kind = ActivityKind(workout.activity_type)
        except ValueError:
            logger.warning(
                f"Workout {workout.provider_id} has unknown activity type "
                f"{workout.activity_type!r}, skipping"
            )
            continue

        if kind not in buckets:
            continue

        buckets[kind].append(workout_route(workout))

    return RouteBuckets(
        walking=tuple(buckets[ActivityKind.WALKING]),
        running=tuple(buckets[ActivityKind.RUNNING]),
        cycling=tuple(buckets[ActivityKind.CYCLING]),
    )
