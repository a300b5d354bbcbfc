"""
Value types for workouts and their GPS routes.

This module contains only dataclasses with NO database or provider imports
to avoid circular dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from plore.shared.constants import ActivityKind


@dataclass(frozen=True)
class LocationSample:
    """A single GPS fix. Ordering only has meaning within a Route."""
    latitude: float
    longitude: float
    timestamp: datetime


# One continuous GPS segment, ordered by delivery
Route = list[LocationSample]

# Output of the tolerance filter; the first sample is always retained
SimplifiedRoute = list[LocationSample]


@dataclass(frozen=True)
class WorkoutRecord:
    """
    Workout metadata as reported by the provider.

    Transient: created per sync pass and merged into the repository.
    """
    provider_id: str
    activity_kind: ActivityKind
    start_date: datetime
    indoor: bool = False


@dataclass(frozen=True)
class RouteChunk:
    """
    One delivery of route samples for a segment.

    `done` marks the terminal chunk. A chunk carrying `error` has its
    samples discarded by the receiver.
    """
    samples: tuple[LocationSample, ...] = ()
    done: bool = False
    error: Optional[Exception] = None


@dataclass(frozen=True)
class RouteBuckets:
    """
    Immutable snapshot of persisted routes grouped by activity kind.

    Each bucket is replaced wholesale on every sync+classify cycle.
    """
    walking: tuple[tuple[LocationSample, ...], ...] = ()
    running: tuple[tuple[LocationSample, ...], ...] = ()
    cycling: tuple[tuple[LocationSample, ...], ...] = ()

    def for_kind(self, kind: ActivityKind) -> tuple[tuple[LocationSample, ...], ...]:
        """Routes for a tracked kind; empty for anything else."""
        return {
            ActivityKind.WALKING: self.walking,
            ActivityKind.RUNNING: self.running,
            ActivityKind.CYCLING: self.cycling,
        }.get(kind, ())

    @property
    def total_routes(self) -> int:
        return len(self.walking) + len(self.running) + len(self.cycling)


@dataclass
class SyncResult:
    """Outcome of one sync entry point call."""
    status: str  # "success" | "skipped"
    reason: Optional[str] = None
    workouts_found: int = 0
    workouts_synced: int = 0
    workouts_failed: int = 0
    points_saved: int = 0
    failed_ids: list[str] = field(default_factory=list)

    def record_failure(self, provider_id: str) -> None:
        self.workouts_failed += 1
        self.failed_ids.append(provider_id)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "reason": self.reason,
            "workouts_found": self.workouts_found,
            "workouts_synced": self.workouts_synced,
            "workouts_failed": self.workouts_failed,
            "points_saved": self.points_saved,
        }
