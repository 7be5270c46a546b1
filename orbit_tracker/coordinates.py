"""
Coordinate Transformations

ECI -> ECEF rotation through Greenwich Mean Sidereal Time, and ECEF ->
geodetic latitude/longitude/altitude on the WGS-84 ellipsoid.

Precession, nutation and polar motion are ignored; UT1 is taken as UTC.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Tuple

import numpy as np
from sgp4.api import jday

from config import WGS84_A_KM, WGS84_F
from orbit_tracker.errors import InvalidState
from orbit_tracker.models import GeodeticPosition, StateVector

TWOPI = 2.0 * math.pi
J2000_JD = 2451545.0


def as_utc(dt: datetime) -> datetime:
    """Return `dt` as an aware UTC datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def datetime_to_jd_fr(dt: datetime) -> Tuple[float, float]:
    """
    Convert datetime to Julian date and fraction.

    Args:
        dt: Datetime object (naive values are taken as UTC)

    Returns:
        Tuple of (julian_day, fraction)
    """
    dt = as_utc(dt)
    return jday(
        dt.year, dt.month, dt.day,
        dt.hour, dt.minute, dt.second + dt.microsecond / 1e6
    )


def gmst(dt: datetime) -> float:
    """
    Greenwich Mean Sidereal Time (IAU-82) in radians, in [0, 2*pi).

    GMST(s) = 67310.54841 + (876600 h + 8640184.812866) T
              + 0.093104 T^2 - 6.2e-6 T^3

    where T is Julian centuries of UT1 since J2000.0.
    """
    jd, fr = datetime_to_jd_fr(dt)
    T = ((jd - J2000_JD) + fr) / 36525.0

    gmst_sec = (
        67310.54841 +
        (876600.0 * 3600.0 + 8640184.812866) * T +
        0.093104 * T * T -
        6.2e-6 * T * T * T
    )

    return (gmst_sec % 86400.0) * (TWOPI / 86400.0)


def eci_to_ecef(r_eci: np.ndarray, theta: float) -> np.ndarray:
    """Rotate an ECI vector by -theta (GMST) about the polar axis."""
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return np.array([
        cos_t * r_eci[0] + sin_t * r_eci[1],
        -sin_t * r_eci[0] + cos_t * r_eci[1],
        r_eci[2]
    ])


def ecef_to_geodetic(r_ecef: np.ndarray, max_iter: int = 5) -> Tuple[float, float, float]:
    """
    ECEF to geodetic conversion using Bowring's method.

    Args:
        r_ecef: Position vector in ECEF coordinates [x, y, z] (km)
        max_iter: Latitude iterations (converges in 2-3 for LEO)

    Returns:
        Tuple of (latitude_deg, longitude_deg, altitude_km)
    """
    a = WGS84_A_KM
    f = WGS84_F
    b = a * (1.0 - f)
    e2 = 2.0 * f - f * f
    ep2 = e2 / (1.0 - e2)

    x, y, z = (float(c) for c in r_ecef)

    lon = math.atan2(y, x)
    p = math.sqrt(x * x + y * y)

    # Pole
    if p < 1e-10:
        lat = math.pi / 2.0 if z >= 0 else -math.pi / 2.0
        return math.degrees(lat), math.degrees(lon), abs(z) - b

    # Initial estimate using Bowring's formula
    theta = math.atan2(z * a, p * b)
    lat = theta

    for _ in range(max_iter):
        sin_theta = math.sin(theta)
        cos_theta = math.cos(theta)

        lat = math.atan2(
            z + ep2 * b * sin_theta ** 3,
            p - e2 * a * cos_theta ** 3
        )

        # Parametric latitude for the next pass
        new_theta = math.atan2((1.0 - f) * math.sin(lat), math.cos(lat))
        if abs(new_theta - theta) < 1e-12:
            break
        theta = new_theta

    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)
    N = a / math.sqrt(1.0 - e2 * sin_lat * sin_lat)

    if abs(cos_lat) > 1e-10:
        alt = p / cos_lat - N
    else:
        alt = z / sin_lat - N * (1.0 - e2)

    return math.degrees(lat), math.degrees(lon), alt


def eci_to_geodetic(state: StateVector, at: Optional[datetime] = None) -> GeodeticPosition:
    """
    Convert an ECI state vector to a geodetic position.

    Args:
        state: ECI state vector
        at: Instant used for sidereal time (defaults to the state's timestamp)

    Returns:
        GeodeticPosition with latitude, longitude, altitude and scalar speed

    Raises:
        InvalidState: state contains non-finite components
    """
    if not state.is_finite():
        raise InvalidState(f"Cannot convert non-finite state at {state.timestamp.isoformat()}")

    at = as_utc(at or state.timestamp)
    r_ecef = eci_to_ecef(state.position, gmst(at))
    lat, lon, alt = ecef_to_geodetic(r_ecef)

    if not all(math.isfinite(value) for value in (lat, lon, alt)):
        raise InvalidState(f"Geodetic conversion produced non-finite values at {at.isoformat()}")

    return GeodeticPosition(
        latitude=lat,
        longitude=lon,
        altitude=alt,
        velocity=state.speed,
        timestamp=at,
    )
