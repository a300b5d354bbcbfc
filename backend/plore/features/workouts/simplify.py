"""
Route point reduction.

Sequential greedy tolerance filter: a sample is kept only when it lies
farther than `tolerance_m` from the last kept sample. One pass, O(n), no
look-ahead, so peaks between kept samples are not preserved.
"""

from typing import Sequence

from plore.shared.geo import haversine_m
from .types import LocationSample, SimplifiedRoute

DEFAULT_TOLERANCE_M = 10.0


def simplify_route(
    route: Sequence[LocationSample],
    tolerance_m: float = DEFAULT_TOLERANCE_M
) -> SimplifiedRoute:
    """
    Reduce route density with a distance threshold.

    Args:
        route: Ordered samples of one segment (may be empty)
        tolerance_m: Minimum gap in meters between retained samples

    Returns:
        Retained samples in original order. The first sample is always kept.

    Raises:
        ValueError: If tolerance_m is not positive
    """
    if tolerance_m <= 0:
        raise ValueError(f"tolerance must be positive, got {tolerance_m}")

    if not route:
        return []

    simplified = [route[0]]
    for sample in route[1:]:
        last = simplified[-1]
        distance = haversine_m(
            last.latitude, last.longitude,
            sample.latitude, sample.longitude
        )
        if distance > tolerance_m:
            simplified.append(sample)

    return simplified
