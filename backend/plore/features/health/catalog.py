"""
Workout catalog fetching.

Queries the provider for workout metadata of one activity kind.
"""

import logging
from datetime import datetime
from typing import Optional

from plore.shared.constants import ActivityKind
from plore.features.workouts.types import WorkoutRecord
from .client import HealthProvider, ProviderError, ProviderQueryError, ProviderThrottle

logger = logging.getLogger(__name__)


class WorkoutCatalogFetcher:
    """
    Fetches eligible workouts from the provider.

    Handles:
    - Full history (first-run backfill) or workouts after a watermark
    - Dropping indoor workouts, which carry no GPS track
    """

    def __init__(self, provider: HealthProvider, throttle: Optional[ProviderThrottle] = None):
        self.provider = provider
        self.throttle = throttle or ProviderThrottle()

    async def fetch_workouts(
        self,
        activity_kind: ActivityKind,
        since: Optional[datetime] = None
    ) -> set[WorkoutRecord]:
        """
        Fetch workouts of one kind.

        Args:
            activity_kind: Kind to query
            since: Only workouts starting strictly after this time.
                   None returns the full history for the kind.

        Returns:
            Set of outdoor workouts

        Raises:
            ProviderQueryError: If authorization is missing or the query fails
        """
        try:
            records = await self.throttle.run(
                self.provider.query_workouts(activity_kind, start=since)
            )
        except ProviderQueryError:
            raise
        except ProviderError as e:
            raise ProviderQueryError(
                f"Workout query for {activity_kind.value} failed: {e}"
            ) from e

        eligible = set()
        indoor_count = 0
        for record in records:
            if record.activity_kind != activity_kind:
                continue
            if since is not None and record.start_date <= since:
                continue
            if record.indoor:
                indoor_count += 1
                continue
            eligible.add(record)

        logger.info(
            f"Catalog {activity_kind.value}: {len(eligible)} eligible workouts"
            + (f" ({indoor_count} indoor skipped)" if indoor_count else "")
        )
        return eligible
