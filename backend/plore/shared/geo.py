"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
DO NOT duplicate these functions elsewhere.
"""
import math

# Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0


def haversine(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def haversine_m(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """Great-circle distance between two points in meters."""
    return haversine(lat1, lon1, lat2, lon2) * 1000
