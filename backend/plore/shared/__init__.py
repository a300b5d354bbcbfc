"""
Shared utilities (NOT business logic).

Usage:
    from plore.shared import haversine_m, ActivityKind
    from plore.shared.repository import BaseRepository
"""
from .geo import (
    haversine,
    haversine_m,
    EARTH_RADIUS_KM,
)
from .constants import (
    ActivityKind,
    TRACKED_ACTIVITY_KINDS,
    PROVIDER_READ_TYPES,
    SYNC_WATERMARK_KEY,
)
from .repository import BaseRepository

__all__ = [
    # geo
    "haversine",
    "haversine_m",
    "EARTH_RADIUS_KM",
    # constants
    "ActivityKind",
    "TRACKED_ACTIVITY_KINDS",
    "PROVIDER_READ_TYPES",
    "SYNC_WATERMARK_KEY",
    # repository
    "BaseRepository",
]
