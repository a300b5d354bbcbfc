"""
Workout sync orchestration.

Coordinates catalog fetching, route fetching, simplification and
persistence. Main entry point for syncing workouts from the provider.

Sync Flow:
1. Initial sync (empty store):
   - Fetch full history for every tracked activity kind
   - Fetch + simplify routes of every workout concurrently
   - Persist through a single writer, commit once
   - Set watermark to the pass start time

2. Incremental sync:
   - No-op while less than `interval` seconds passed since the watermark
   - Otherwise fetch workouts started after the watermark and process
     them exactly like the initial sync

A failed workout is logged and skipped. A failed commit rolls the whole
pass back and leaves the watermark untouched, so the next pass covers the
same window again (at-least-once).
"""

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from plore.shared.constants import ActivityKind, PROVIDER_READ_TYPES
from plore.shared.timeutils import utcnow
from plore.features.health import (
    HealthProvider,
    ProviderThrottle,
    ProviderError,
    ProviderAuthorizationError,
    ProviderQueryError,
    WorkoutCatalogFetcher,
    RouteFetcher,
)
from ..classify import classify
from ..repository import WorkoutRepository
from ..simplify import simplify_route
from ..types import RouteBuckets, SimplifiedRoute, SyncResult, WorkoutRecord
from .config import SyncConfig, ACTIVITY_KINDS_TO_SYNC
from .watermark import SyncWatermarkStore

logger = logging.getLogger(__name__)

RoutesListener = Callable[[RouteBuckets], Union[None, Awaitable[None]]]

# Writer queue item: a processed workout, or None to stop the writer
_WriteItem = Optional[tuple[WorkoutRecord, list[SimplifiedRoute]]]


class SyncError(Exception):
    """Base sync error."""
    pass


class SyncCommitError(SyncError):
    """The pass could not be committed; nothing was persisted."""
    pass


class SyncCoordinator:
    """
    Main sync orchestrator.

    Owns the sync watermark and the latest route buckets snapshot.
    Only one pass runs at a time; a second call while a pass is in flight
    is skipped.

    Usage:
        coordinator = SyncCoordinator(provider, AsyncSessionLocal)
        coordinator.subscribe(on_routes)
        await coordinator.load_routes()
        result = await coordinator.incremental_sync()
    """

    def __init__(
        self,
        provider: HealthProvider,
        db_factory: async_sessionmaker[AsyncSession],
        tolerance_m: Optional[float] = None,
        throttle: Optional[ProviderThrottle] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        if tolerance_m is None:
            tolerance_m = SyncConfig.SIMPLIFY_TOLERANCE_M
        if tolerance_m <= 0:
            raise ValueError(f"Simplification tolerance must be positive, got {tolerance_m}")

        self.provider = provider
        self.tolerance_m = tolerance_m
        self.throttle = throttle or ProviderThrottle()
        self.catalog = WorkoutCatalogFetcher(provider, self.throttle)
        self.route_fetcher = RouteFetcher(provider, self.throttle)
        self._db_factory = db_factory
        self._clock = clock
        self._pass_lock = asyncio.Lock()
        self._pass_task: Optional[asyncio.Task] = None
        self._listeners: list[RoutesListener] = []
        self._routes = RouteBuckets()

    # -------------------------------------------------------------------------
    # Snapshot & Listeners
    # -------------------------------------------------------------------------

    @property
    def routes(self) -> RouteBuckets:
        """Latest published route buckets."""
        return self._routes

    @property
    def sync_in_progress(self) -> bool:
        return self._pass_lock.locked()

    def subscribe(self, listener: RoutesListener) -> Callable[[], None]:
        """
        Register a callback receiving every new RouteBuckets snapshot.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _publish(self, buckets: RouteBuckets) -> None:
        self._routes = buckets
        for listener in list(self._listeners):
            try:
                outcome = listener(buckets)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"Routes listener {listener!r} failed: {e}")

    async def _refresh_routes(self, repo: WorkoutRepository) -> RouteBuckets:
        """Classify everything persisted and publish the snapshot."""
        workouts = await repo.fetch_all_workouts()
        buckets = classify(workouts)
        await self._publish(buckets)
        logger.info(
            f"Published routes: walking={len(buckets.walking)} "
            f"running={len(buckets.running)} cycling={len(buckets.cycling)}"
        )
        return buckets

    # -------------------------------------------------------------------------
    # Entry Points
    # -------------------------------------------------------------------------

    async def load_routes(self) -> RouteBuckets:
        """
        Publish persisted routes, backfilling from the provider first if the
        store is empty.
        """
        async with self._db_factory() as db:
            repo = WorkoutRepository(db)
            if await repo.count_workouts() > 0:
                return await self._refresh_routes(repo)

        await self.initial_sync()
        return self._routes

    async def initial_sync(self) -> SyncResult:
        """
        Backfill the full history of every tracked activity kind.

        Only runs when the store holds no workouts.

        Raises:
            ProviderAuthorizationError: If provider access is not granted
            SyncCommitError: If the pass could not be committed
        """
        return await self._run_exclusive(self._initial_pass)

    async def incremental_sync(self, interval: Optional[float] = None) -> SyncResult:
        """
        Sync workouts started after the watermark.

        Args:
            interval: Minimum seconds since the watermark; defaults to
                      SyncConfig.MIN_SYNC_INTERVAL_SECONDS

        Raises:
            ProviderAuthorizationError: If provider access is not granted
            SyncCommitError: If the pass could not be committed
        """
        if interval is None:
            interval = SyncConfig.MIN_SYNC_INTERVAL_SECONDS
        return await self._run_exclusive(self._incremental_pass, interval)

    def cancel(self) -> bool:
        """
        Abort the in-flight pass, if any.

        The pass is rolled back and the watermark is left untouched.

        Returns:
            True if a pass was cancelled
        """
        if self._pass_task is None or self._pass_task.done():
            return False
        self._pass_task.cancel()
        logger.info("Sync pass cancellation requested")
        return True

    async def _run_exclusive(self, pass_fn, *args) -> SyncResult:
        if self._pass_lock.locked():
            logger.info("Sync already in progress, skipping")
            return SyncResult(status="skipped", reason="already_in_progress")

        async with self._pass_lock:
            self._pass_task = asyncio.ensure_future(pass_fn(*args))
            try:
                return await self._pass_task
            except asyncio.CancelledError:
                logger.warning("Sync pass cancelled, nothing committed")
                raise
            finally:
                self._pass_task = None

    # -------------------------------------------------------------------------
    # Passes
    # -------------------------------------------------------------------------

    async def _initial_pass(self) -> SyncResult:
        async with self._db_factory() as db:
            repo = WorkoutRepository(db)
            if await repo.count_workouts() > 0:
                logger.info("Store already holds workouts, initial sync skipped")
                return SyncResult(status="skipped", reason="store_not_empty")

            started_at = self._clock()
            logger.info("Starting initial sync (full history)")
            result = await self._run_pass(repo, since=None)
            await self._advance_watermark(SyncWatermarkStore(db), started_at)
            await self._refresh_routes(repo)
            return result

    async def _incremental_pass(self, interval: float) -> SyncResult:
        async with self._db_factory() as db:
            watermark = SyncWatermarkStore(db)
            last_sync = await watermark.get()
            now = self._clock()

            if last_sync is not None and (now - last_sync).total_seconds() < interval:
                logger.info(
                    f"Skipping sync: last sync at {last_sync.isoformat()}, "
                    f"interval {interval}s not elapsed"
                )
                return SyncResult(status="skipped", reason="interval_not_elapsed")

            logger.info(
                f"Starting incremental sync since "
                f"{last_sync.isoformat() if last_sync else 'beginning'}"
            )
            repo = WorkoutRepository(db)
            result = await self._run_pass(repo, since=last_sync)
            await self._advance_watermark(watermark, now)
            await self._refresh_routes(repo)
            return result

    async def _advance_watermark(self, watermark: SyncWatermarkStore, value: datetime) -> None:
        try:
            await watermark.advance(value)
        except SQLAlchemyError as e:
            await watermark.db.rollback()
            raise SyncCommitError(f"Failed to store sync watermark: {e}") from e

    async def _run_pass(
        self,
        repo: WorkoutRepository,
        since: Optional[datetime]
    ) -> SyncResult:
        """Fetch, simplify and persist one window; commit once."""
        await self._authorize()

        records = await self._fetch_catalog(since)
        result = SyncResult(status="success", workouts_found=len(records))

        if records:
            logger.info(f"Found {len(records)} workouts to sync")
            queue: asyncio.Queue[_WriteItem] = asyncio.Queue()
            writer = asyncio.create_task(self._drain_writes(repo, queue, result))
            try:
                await asyncio.gather(
                    *(self._process_workout(record, queue, result) for record in records)
                )
                await queue.put(None)
                await writer
            finally:
                if not writer.done():
                    writer.cancel()
        else:
            logger.info("No new workouts found")

        try:
            await repo.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to commit sync pass: {e}")
            await repo.rollback()
            raise SyncCommitError(f"Failed to commit sync pass: {e}") from e

        logger.info(
            f"Synced {result.workouts_synced}/{result.workouts_found} workouts, "
            f"{result.points_saved} points saved, {result.workouts_failed} failed"
        )
        return result

    async def _authorize(self) -> None:
        """
        Raises:
            ProviderAuthorizationError: If read access is not granted
        """
        try:
            granted = await self.throttle.run(self.provider.authorize(PROVIDER_READ_TYPES))
        except ProviderAuthorizationError:
            raise
        except ProviderError as e:
            raise ProviderAuthorizationError(f"Provider authorization failed: {e}") from e

        if not granted:
            raise ProviderAuthorizationError("Provider read access not granted")

    async def _fetch_catalog(self, since: Optional[datetime]) -> list[WorkoutRecord]:
        results = await asyncio.gather(
            *(self._fetch_kind(kind, since) for kind in ACTIVITY_KINDS_TO_SYNC)
        )
        records: set[WorkoutRecord] = set().union(*results)
        return sorted(records, key=lambda r: (r.start_date, r.provider_id))

    async def _fetch_kind(
        self,
        kind: ActivityKind,
        since: Optional[datetime]
    ) -> set[WorkoutRecord]:
        try:
            return await self.catalog.fetch_workouts(kind, since=since)
        except ProviderQueryError as e:
            logger.error(f"Error fetching {kind.value} workouts: {e}")
            return set()

    async def _process_workout(
        self,
        record: WorkoutRecord,
        queue: "asyncio.Queue[_WriteItem]",
        result: SyncResult
    ) -> None:
        """Fetch and simplify one workout's routes, then hand off to the writer."""
        try:
            routes = await self.route_fetcher.fetch_routes(record)
        except ProviderError as e:
            logger.error(f"Failed to fetch routes for workout {record.provider_id}: {e}")
            result.record_failure(record.provider_id)
            return

        simplified = [simplify_route(route, self.tolerance_m) for route in routes]
        logger.debug(
            f"Workout {record.provider_id}: {sum(len(r) for r in routes)} samples "
            f"-> {sum(len(r) for r in simplified)} after simplification"
        )
        await queue.put((record, simplified))

    async def _drain_writes(
        self,
        repo: WorkoutRepository,
        queue: "asyncio.Queue[_WriteItem]",
        result: SyncResult
    ) -> None:
        """Single writer: the only user of the session during a pass."""
        while True:
            item = await queue.get()
            if item is None:
                return

            record, routes = item
            try:
                # Savepoint per workout: a failed flush only discards this workout
                async with repo.db.begin_nested():
                    workout = await repo.find_or_create_workout(record)
                    saved = 0
                    for route in routes:
                        saved += await repo.append_route_points(workout, route)
            except SQLAlchemyError as e:
                logger.error(f"Failed to persist workout {record.provider_id}: {e}")
                result.record_failure(record.provider_id)
                continue

            result.workouts_synced += 1
            result.points_saved += saved
