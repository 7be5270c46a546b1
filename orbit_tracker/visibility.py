"""
Visibility Evaluator

Surface distance, approximate elevation and overhead checks between an
observer and a satellite sub-point.

The model uses a spherical Earth of radius 6371 km. Elevation is
atan2(altitude difference, surface distance), clamped at zero: it is a
monotonic "how high above the horizon" signal rather than the literal
topocentric elevation, and it never goes negative.
"""

import math

from config import MEAN_EARTH_RADIUS_KM


def surface_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points via the haversine formula.

    Args:
        lat1, lon1: First point (degrees)
        lat2, lon2: Second point (degrees)

    Returns:
        Distance along the surface (km)
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (math.sin(d_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2)
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return MEAN_EARTH_RADIUS_KM * c


def elevation(observer, subpoint) -> float:
    """
    Approximate elevation of a satellite above the observer's horizon.

    Args:
        observer: Object with latitude, longitude and altitude (km)
        subpoint: Satellite GeodeticPosition

    Returns:
        Elevation in degrees, >= 0
    """
    distance = surface_distance(
        observer.latitude, observer.longitude,
        subpoint.latitude, subpoint.longitude
    )
    height = subpoint.altitude - getattr(observer, "altitude", 0.0)

    return max(0.0, math.degrees(math.atan2(height, distance)))


def is_over_location(satellite, target, swath_width_km: float = 200.0) -> bool:
    """True when the target lies inside the satellite's swath (distance < width / 2)."""
    distance = surface_distance(
        satellite.latitude, satellite.longitude,
        target.latitude, target.longitude
    )
    return distance < swath_width_km / 2
