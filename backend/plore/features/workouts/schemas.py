"""
Workout-related schemas.

Pydantic models for route and sync API responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .types import LocationSample, RouteBuckets


class RoutePointSchema(BaseModel):
    """Single point of a simplified route."""

    lat: float
    lon: float
    timestamp: datetime


class RouteBucketsResponse(BaseModel):
    """Routes grouped by activity kind; each bucket is replaced wholesale."""

    walking: List[List[RoutePointSchema]]
    running: List[List[RoutePointSchema]]
    cycling: List[List[RoutePointSchema]]

    @classmethod
    def from_buckets(cls, buckets: RouteBuckets) -> "RouteBucketsResponse":
        def _route(samples: tuple[LocationSample, ...]) -> List[RoutePointSchema]:
            return [
                RoutePointSchema(lat=s.latitude, lon=s.longitude, timestamp=s.timestamp)
                for s in samples
            ]

        return cls(
            walking=[_route(r) for r in buckets.walking],
            running=[_route(r) for r in buckets.running],
            cycling=[_route(r) for r in buckets.cycling],
        )


class SyncResponse(BaseModel):
    """Result of a sync request."""

    status: str
    reason: Optional[str] = None
    workouts_found: int = 0
    workouts_synced: int = 0
    workouts_failed: int = 0
    points_saved: int = 0
