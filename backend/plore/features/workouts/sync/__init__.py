"""
Workout sync services.

Provides:
- SyncCoordinator: Main sync orchestrator (initial / incremental passes)
- SyncWatermarkStore: Persisted sync watermark
- BackgroundSyncRunner: Background sync task runner
"""

from .service import SyncCoordinator, SyncError, SyncCommitError
from .watermark import SyncWatermarkStore
from .background import BackgroundSyncRunner, background_sync
from .config import SyncConfig, ACTIVITY_KINDS_TO_SYNC

__all__ = [
    # Services
    "SyncCoordinator",
    "SyncError",
    "SyncCommitError",
    "SyncWatermarkStore",
    # Background
    "BackgroundSyncRunner",
    "background_sync",
    # Config
    "SyncConfig",
    "ACTIVITY_KINDS_TO_SYNC",
]
