"""
Tests for RouteFetcher chunk reassembly.
"""

import asyncio

import pytest

from plore.features.health import RouteFetcher, ProviderQueryError, ProviderThrottle
from plore.features.workouts.types import RouteChunk
from tests.helpers import sample, workout


P1, P2, P3, P4 = (sample(i, i, i) for i in range(4))


@pytest.mark.asyncio
async def test_chunks_concatenated_in_arrival_order(provider):
    provider.add_workout(workout("w"))
    provider.routes["w"] = ["seg"]
    provider.chunks["seg"] = [
        RouteChunk(samples=(P1, P2)),
        RouteChunk(samples=(P3,), done=True),
    ]

    routes = await RouteFetcher(provider).fetch_routes(workout("w"))

    assert routes == [[P1, P2, P3]]


@pytest.mark.asyncio
async def test_no_segments_returns_empty_list(provider):
    provider.add_workout(workout("w"))

    assert await RouteFetcher(provider).fetch_routes(workout("w")) == []


@pytest.mark.asyncio
async def test_multiple_segments_kept_separate_and_ordered(provider):
    provider.add_workout(workout("w"), [P1, P2], [P3], [P4])

    routes = await RouteFetcher(provider).fetch_routes(workout("w"))

    assert routes == [[P1, P2], [P3], [P4]]


@pytest.mark.asyncio
async def test_chunk_error_dropped_segment_still_finalizes(provider):
    provider.routes["w"] = ["seg"]
    provider.chunks["seg"] = [
        RouteChunk(samples=(P1,)),
        RouteChunk(samples=(P2,), error=RuntimeError("bad chunk")),
        RouteChunk(samples=(P3,), done=True),
    ]

    routes = await RouteFetcher(provider).fetch_routes(workout("w"))

    assert routes == [[P1, P3]]


@pytest.mark.asyncio
async def test_error_on_terminal_chunk_keeps_partial(provider):
    provider.routes["w"] = ["seg"]
    provider.chunks["seg"] = [
        RouteChunk(samples=(P1, P2)),
        RouteChunk(done=True, error=ProviderQueryError("page failed")),
    ]

    routes = await RouteFetcher(provider).fetch_routes(workout("w"))

    assert routes == [[P1, P2]]


@pytest.mark.asyncio
async def test_chunks_after_terminal_are_ignored(provider):
    provider.routes["w"] = ["seg"]
    provider.chunks["seg"] = [
        RouteChunk(samples=(P1,), done=True),
        RouteChunk(samples=(P2,), done=True),
    ]

    routes = await RouteFetcher(provider).fetch_routes(workout("w"))

    assert routes == [[P1]]


@pytest.mark.asyncio
async def test_stream_without_terminal_chunk_keeps_samples(provider):
    provider.routes["w"] = ["seg"]
    provider.chunks["seg"] = [RouteChunk(samples=(P1, P2))]

    routes = await RouteFetcher(provider).fetch_routes(workout("w"))

    assert routes == [[P1, P2]]


@pytest.mark.asyncio
async def test_listing_failure_raises(provider):
    provider.failing_route_listings.add("w")

    with pytest.raises(ProviderQueryError):
        await RouteFetcher(provider).fetch_routes(workout("w"))


@pytest.mark.asyncio
async def test_stalled_chunk_times_out_with_partial_data(provider):
    async def slow_samples(route_ref):
        yield RouteChunk(samples=(P1,))
        await asyncio.sleep(10)
        yield RouteChunk(samples=(P2,), done=True)

    provider.routes["w"] = ["seg"]
    provider.query_route_samples = slow_samples
    fetcher = RouteFetcher(provider, ProviderThrottle(max_concurrent=2, timeout_seconds=0.05))

    routes = await fetcher.fetch_routes(workout("w"))

    assert routes == [[P1]]


@pytest.mark.asyncio
async def test_segments_fetched_concurrently_within_bound(provider):
    active = 0
    peak = 0

    async def tracked_samples(route_ref):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        yield RouteChunk(samples=(P1,), done=True)

    provider.routes["w"] = [f"seg{i}" for i in range(6)]
    provider.query_route_samples = tracked_samples
    fetcher = RouteFetcher(provider, ProviderThrottle(max_concurrent=3, timeout_seconds=1))

    routes = await fetcher.fetch_routes(workout("w"))

    assert len(routes) == 6
    assert 1 < peak <= 3
