"""
Health data provider client.

Provides the provider contract used by the sync core and an HTTP
implementation for a REST health-data API.

Provider API (HttpHealthProvider):
- POST /authorize                        -> {"authorized": bool}
- GET  /workouts?activity_type=&start=   -> {"workouts": [...]}
- GET  /workouts/{id}/routes             -> {"routes": [{"id": ...}]}
- GET  /routes/{id}/samples?page=N       -> {"samples": [...], "has_more": bool}

Each samples page is one chunk; `has_more == false` is the terminal signal.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncIterator, Awaitable, Iterable, Optional, TypeVar

import httpx

from plore.config import settings
from plore.shared.constants import ActivityKind
from plore.shared.timeutils import parse_iso
from plore.features.workouts.types import LocationSample, RouteChunk, WorkoutRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Exceptions
# =============================================================================

class ProviderError(Exception):
    """Base provider error."""
    pass


class ProviderAuthorizationError(ProviderError):
    """Provider access was not granted or has been revoked."""
    pass


class ProviderQueryError(ProviderError):
    """A provider query failed or timed out."""
    pass


# =============================================================================
# Call Limiter
# =============================================================================

class ProviderThrottle:
    """
    Bounds in-flight provider calls and applies a timeout to each one.

    Every provider-facing await in the sync core goes through `run()`.
    """

    def __init__(
        self,
        max_concurrent: Optional[int] = None,
        timeout_seconds: Optional[float] = None
    ):
        self.max_concurrent = max_concurrent or settings.max_concurrent_provider_calls
        self.timeout_seconds = timeout_seconds or settings.provider_timeout_seconds
        self._semaphore = asyncio.Semaphore(self.max_concurrent)
        self._in_flight = 0

    async def run(self, call: Awaitable[T]) -> T:
        """
        Await a provider call under the concurrency bound.

        Raises:
            ProviderQueryError: If the call does not finish in time
        """
        async with self._semaphore:
            self._in_flight += 1
            try:
                return await asyncio.wait_for(call, timeout=self.timeout_seconds)
            except asyncio.TimeoutError as e:
                raise ProviderQueryError(
                    f"Provider call timed out after {self.timeout_seconds}s"
                ) from e
            finally:
                self._in_flight -= 1

    @property
    def in_flight(self) -> int:
        return self._in_flight


# =============================================================================
# Provider Contract
# =============================================================================

class HealthProvider(ABC):
    """
    External source of workouts and GPS routes.

    All calls are asynchronous and may fail independently.
    """

    @abstractmethod
    async def authorize(self, types: Iterable[str]) -> bool:
        """Request read access for the given data types."""

    @abstractmethod
    async def query_workouts(
        self,
        activity_kind: ActivityKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> list[WorkoutRecord]:
        """Workouts of one kind, optionally limited to a date range."""

    @abstractmethod
    async def query_route_refs(self, workout: WorkoutRecord) -> list[str]:
        """References of the route segments recorded for a workout."""

    @abstractmethod
    def query_route_samples(self, route_ref: str) -> AsyncIterator[RouteChunk]:
        """Chunked samples of one segment, ending with a `done` chunk."""


# =============================================================================
# HTTP Provider
# =============================================================================

def _parse_kind(value: Optional[str]) -> ActivityKind:
    try:
        return ActivityKind((value or "").lower())
    except ValueError:
        return ActivityKind.OTHER


def parse_workout(data: dict) -> WorkoutRecord:
    """Build a WorkoutRecord from a provider workout payload."""
    return WorkoutRecord(
        provider_id=str(data["id"]),
        activity_kind=_parse_kind(data.get("activity_type")),
        start_date=parse_iso(data["start_date"]),
        indoor=bool(data.get("indoor", False)),
    )


def parse_sample(data: dict) -> LocationSample:
    """Build a LocationSample from a provider sample payload."""
    return LocationSample(
        latitude=float(data["latitude"]),
        longitude=float(data["longitude"]),
        timestamp=parse_iso(data["timestamp"]),
    )


class HttpHealthProvider(HealthProvider):
    """
    Async client for a REST health-data API.

    Usage:
        provider = HttpHealthProvider()
        if await provider.authorize(PROVIDER_READ_TYPES):
            workouts = await provider.query_workouts(ActivityKind.RUNNING)
    """

    MAX_CONSECUTIVE_PAGE_FAILURES = 3

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        page_size: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.provider_api_url).rstrip("/")
        self.token = token if token is not None else settings.provider_api_token
        self.page_size = page_size or settings.route_page_size
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            transport=self._transport
        )

    async def _api_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None
    ) -> dict:
        """
        Make an authenticated API request.

        Raises:
            ProviderAuthorizationError: If the provider rejects credentials
            ProviderQueryError: If the request fails or returns an error
        """
        try:
            async with self._client() as client:
                response = await client.request(method, endpoint, params=params, json=json)
        except httpx.HTTPError as e:
            raise ProviderQueryError(f"{method} {endpoint} failed: {e}") from e

        logger.debug(f"Provider {method} {endpoint}: {response.status_code}")

        if response.status_code in (401, 403):
            raise ProviderAuthorizationError("Provider access denied")
        elif response.status_code != 200:
            raise ProviderQueryError(
                f"API error: {response.status_code} - {response.text}"
            )

        return response.json()

    async def authorize(self, types: Iterable[str]) -> bool:
        try:
            data = await self._api_request("POST", "/authorize", json={"read": list(types)})
        except ProviderAuthorizationError:
            return False
        return bool(data.get("authorized", False))

    async def query_workouts(
        self,
        activity_kind: ActivityKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> list[WorkoutRecord]:
        params = {"activity_type": activity_kind.value}
        if start:
            params["start"] = start.isoformat()
        if end:
            params["end"] = end.isoformat()

        data = await self._api_request("GET", "/workouts", params=params)
        try:
            return [parse_workout(item) for item in data.get("workouts", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderQueryError(f"Malformed workout payload: {e}") from e

    async def query_route_refs(self, workout: WorkoutRecord) -> list[str]:
        data = await self._api_request("GET", f"/workouts/{workout.provider_id}/routes")
        return [str(route["id"]) for route in data.get("routes", [])]

    async def query_route_samples(self, route_ref: str) -> AsyncIterator[RouteChunk]:
        """
        Yield one chunk per samples page.

        A failed page becomes an error chunk and paging moves on to the next
        page. After MAX_CONSECUTIVE_PAGE_FAILURES failures in a row the error
        chunk is terminal.
        """
        page = 1
        failures = 0
        while True:
            try:
                data = await self._api_request(
                    "GET",
                    f"/routes/{route_ref}/samples",
                    params={"page": page, "per_page": self.page_size}
                )
                samples = tuple(parse_sample(item) for item in data.get("samples", []))
            except (ProviderError, KeyError, TypeError, ValueError) as e:
                failures += 1
                if failures >= self.MAX_CONSECUTIVE_PAGE_FAILURES:
                    logger.warning(
                        f"Route {route_ref}: {failures} consecutive page failures, giving up"
                    )
                    yield RouteChunk(done=True, error=e)
                    return
                yield RouteChunk(error=e)
                page += 1
                continue

            failures = 0
            done = not data.get("has_more", False)
            yield RouteChunk(samples=samples, done=done)
            if done:
                return
            page += 1
