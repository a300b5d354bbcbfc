"""
Route fetching.

Fetches the GPS segments of a workout and reassembles chunked delivery.
"""

import asyncio
import logging
from typing import Optional

from plore.features.workouts.types import Route, WorkoutRecord
from .client import HealthProvider, ProviderError, ProviderQueryError, ProviderThrottle

logger = logging.getLogger(__name__)


class RouteFetcher:
    """
    Fetches all route segments of a workout.

    Segments are fetched concurrently. Chunks of one segment are
    concatenated in arrival order until the terminal chunk arrives.
    A failed chunk is dropped; its segment keeps what was received.
    """

    def __init__(self, provider: HealthProvider, throttle: Optional[ProviderThrottle] = None):
        self.provider = provider
        self.throttle = throttle or ProviderThrottle()

    async def fetch_routes(self, workout: WorkoutRecord) -> list[Route]:
        """
        Fetch every route segment of a workout.

        Returns:
            Segments in the order the provider listed them.
            Empty list when the workout has no segments.

        Raises:
            ProviderQueryError: If the segment listing itself fails
        """
        try:
            route_refs = await self.throttle.run(self.provider.query_route_refs(workout))
        except ProviderQueryError:
            raise
        except ProviderError as e:
            raise ProviderQueryError(
                f"Route listing for workout {workout.provider_id} failed: {e}"
            ) from e

        if not route_refs:
            logger.debug(f"Workout {workout.provider_id} has no route segments")
            return []

        routes = await asyncio.gather(
            *(self._fetch_segment(workout, ref) for ref in route_refs)
        )
        return list(routes)

    async def _fetch_segment(self, workout: WorkoutRecord, route_ref: str) -> Route:
        """Collect one segment until its terminal chunk."""
        samples: Route = []
        chunks = self.provider.query_route_samples(route_ref)
        try:
            while True:
                try:
                    chunk = await self.throttle.run(anext(chunks, None))
                except ProviderError as e:
                    logger.error(
                        f"Route {route_ref} of workout {workout.provider_id} stalled: {e}"
                    )
                    break

                if chunk is None:
                    logger.warning(
                        f"Route {route_ref} ended without a terminal chunk "
                        f"({len(samples)} samples kept)"
                    )
                    break

                if chunk.error is not None:
                    logger.error(f"Route {route_ref} chunk error: {chunk.error}")
                else:
                    samples.extend(chunk.samples)

                if chunk.done:
                    break
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()

        return samples
