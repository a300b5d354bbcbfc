"""
Unified constants for activity kinds.

This module provides a single source of truth for activity kind naming
across the entire application.
"""

from enum import Enum


class ActivityKind(str, Enum):
    """
    Workout activity kinds known to the sync core.

    Used in:
    - Provider catalog queries
    - Persisted workouts (activity_type column)
    - Route bucket classification
    """
    WALKING = "walking"
    RUNNING = "running"
    CYCLING = "cycling"
    OTHER = "other"


# Kinds that are fetched from the provider and bucketed for presentation
TRACKED_ACTIVITY_KINDS: tuple[ActivityKind, ...] = (
    ActivityKind.WALKING,
    ActivityKind.RUNNING,
    ActivityKind.CYCLING,
)

# Provider data types requested during authorization
PROVIDER_READ_TYPES: tuple[str, ...] = ("workout", "workout_route")

# Key-value slot holding the sync watermark
SYNC_WATERMARK_KEY = "last_sync_at"
