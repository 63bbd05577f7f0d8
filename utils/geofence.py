# utils/geofence.py

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    φ1, φ2 = radians(lat1), radians(lat2)
    Δφ = radians(lat2 - lat1)
    Δλ = radians(lng2 - lng1)

    a = sin(Δφ/2)**2 + cos(φ1) * cos(φ2) * sin(Δλ/2)**2
    # Rounding can push a past 1 for near-antipodal points
    c = 2 * atan2(sqrt(a), sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_KM * c


def distance_km(a, b) -> float:
    """Great-circle distance between two positions. NaN coordinates yield NaN."""
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def is_within(position, perimeter) -> bool:
    # Boundary counts as inside; a NaN distance compares False
    return distance_km(position, perimeter.center) <= perimeter.radius_km
