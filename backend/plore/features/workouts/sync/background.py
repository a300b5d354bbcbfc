"""
Background sync runner.

Handles scheduled background synchronization of workouts.
"""

import asyncio
import logging
from typing import Optional

from plore.features.health import ProviderAuthorizationError
from .config import SyncConfig
from .service import SyncCoordinator

logger = logging.getLogger(__name__)


class BackgroundSyncRunner:
    """
    Background task runner for workout sync.

    The first iteration loads persisted routes (backfilling an empty store),
    later iterations run incremental syncs. Call `stop()` to cancel the loop
    and any in-flight pass.

    Usage:
        runner = BackgroundSyncRunner()
        await runner.start(coordinator)
        # ... later ...
        await runner.stop()
    """

    def __init__(self, interval_seconds: Optional[float] = None):
        self.interval_seconds = interval_seconds or SyncConfig.BACKGROUND_SYNC_INTERVAL_SECONDS
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._coordinator: Optional[SyncCoordinator] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, coordinator: SyncCoordinator):
        """Start background sync loop."""
        if self._running:
            return

        self._running = True
        self._coordinator = coordinator
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Background sync started")

    async def stop(self):
        """Stop background sync loop."""
        self._running = False
        if self._coordinator:
            self._coordinator.cancel()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Background sync stopped")

    async def _run_loop(self):
        """Main sync loop."""
        first = True
        while self._running:
            try:
                if first:
                    await self._coordinator.load_routes()
                    first = False
                else:
                    result = await self._coordinator.incremental_sync()
                    logger.debug(f"Background sync result: {result.to_dict()}")
            except ProviderAuthorizationError as e:
                logger.warning(f"Background sync not authorized: {e}")
            except Exception as e:
                logger.error(f"Background sync error: {e}")

            # Wait before next pass
            await asyncio.sleep(self.interval_seconds)


# Global runner instance
background_sync = BackgroundSyncRunner()
