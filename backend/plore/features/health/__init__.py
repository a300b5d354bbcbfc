"""
Health data provider integration.

Usage:
    from plore.features.health import HttpHealthProvider, WorkoutCatalogFetcher, RouteFetcher

Components:
- HealthProvider: Provider contract (authorize, workouts, route samples)
- HttpHealthProvider: REST implementation over httpx
- ProviderThrottle: Concurrency bound and timeout for provider calls
- WorkoutCatalogFetcher: Eligible workouts per activity kind
- RouteFetcher: Chunked route segment reassembly
"""

from .client import (
    HealthProvider,
    HttpHealthProvider,
    ProviderThrottle,
    ProviderError,
    ProviderAuthorizationError,
    ProviderQueryError,
)
from .catalog import WorkoutCatalogFetcher
from .routes import RouteFetcher

__all__ = [
    # Client
    "HealthProvider",
    "HttpHealthProvider",
    "ProviderThrottle",
    "ProviderError",
    "ProviderAuthorizationError",
    "ProviderQueryError",
    # Fetchers
    "WorkoutCatalogFetcher",
    "RouteFetcher",
]
