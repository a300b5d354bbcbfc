"""
Workout storage and route projection.

Usage:
    from plore.features.workouts import WorkoutRepository, classify, simplify_route
    from plore.features.workouts.sync import SyncCoordinator

Models:
- Workout: Synced workout, merged by provider_id
- RoutePoint: Simplified GPS sample
- KeyValue: Durable named slots (sync watermark)
"""

from .types import (
    LocationSample,
    Route,
    SimplifiedRoute,
    WorkoutRecord,
    RouteChunk,
    RouteBuckets,
    SyncResult,
)
from .models import Workout, RoutePoint, KeyValue
from .repository import WorkoutRepository, KeyValueRepository
from .simplify import simplify_route, DEFAULT_TOLERANCE_M
from .classify import classify, workout_route

__all__ = [
    # Types
    "LocationSample",
    "Route",
    "SimplifiedRoute",
    "WorkoutRecord",
    "RouteChunk",
    "RouteBuckets",
    "SyncResult",
    # Models
    "Workout",
    "RoutePoint",
    "KeyValue",
    # Repositories
    "WorkoutRepository",
    "KeyValueRepository",
    # Processing
    "simplify_route",
    "DEFAULT_TOLERANCE_M",
    "classify",
    "workout_route",
]
