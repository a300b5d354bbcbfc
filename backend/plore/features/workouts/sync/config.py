"""
Workout sync configuration constants.

Contains all configuration values for sync behavior.
"""

from plore.config import settings
from plore.shared.constants import TRACKED_ACTIVITY_KINDS


# Re-export with consistent naming
ACTIVITY_KINDS_TO_SYNC = TRACKED_ACTIVITY_KINDS


class SyncConfig:
    """Configuration for sync behavior."""

    # Minimum interval between incremental syncs (seconds)
    MIN_SYNC_INTERVAL_SECONDS = settings.sync_interval_seconds

    # Route simplification tolerance (meters)
    SIMPLIFY_TOLERANCE_M = settings.simplify_tolerance_m

    # Background loop wake-up interval (seconds). Each wake-up runs an
    # incremental sync, which itself is a no-op inside MIN_SYNC_INTERVAL.
    BACKGROUND_SYNC_INTERVAL_SECONDS = 300  # 5 minutes
