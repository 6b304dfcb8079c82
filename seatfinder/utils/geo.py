# seatfinder/utils/geo.py
# Great-circle distance and walking-time estimates between a query origin and a venue.

import math
from math import radians, sin, cos, sqrt, asin
from typing import Optional

# Earth's radius in meters
R = 6371000.0

# Average walking speed of 5 km/h
WALKING_SPEED_M_PER_MIN = 83.33


def distance_meters(origin_lat: float, origin_lng: float, target_lat: float, target_lng: float) -> float:
    """
    Calculate the great-circle distance between two points
    on the Earth (specified in decimal degrees) using the Haversine formula.

    Args:
        origin_lat: Latitude of the query origin.
        origin_lng: Longitude of the query origin.
        target_lat: Latitude of the venue.
        target_lng: Longitude of the venue.

    Returns:
        Distance between the two points in meters. NaN inputs yield NaN.
    """
    lat1, lon1, lat2, lon2 = map(radians, [origin_lat, origin_lng, target_lat, target_lng])

    dlon = lon2 - lon1
    dlat = lat2 - lat1

    a = sin(dlat / 2)**2 + cos(lat1) * cos(lat2) * sin(dlon / 2)**2
    # Rounding can push a a hair above 1 for antipodal points
    c = 2 * asin(sqrt(min(a, 1.0)))

    return R * c


def walking_minutes(distance_m: float) -> int:
    """Whole minutes needed to walk ``distance_m`` meters, rounded up."""
    if math.isnan(distance_m) or distance_m <= 0:
        return 0
    return math.ceil(distance_m / WALKING_SPEED_M_PER_MIN)


def format_distance(meters: Optional[int]) -> Optional[str]:
    """Short label for a distance: ``"350m"`` below a kilometre, ``"1.2km"`` above."""
    if not meters:
        return None
    if meters < 1000:
        return f"{meters}m"
    return f"{meters / 1000:.1f}km"
