"""
Orbit Tracker Configuration and Constants

This module contains the physical constants, the sample satellite catalog and
the environment-driven defaults used throughout the project.

Constants:
    WGS-72 gravitational constants (Vallado et al. 2006, AAS 06-675) drive the
    orbital propagation. WGS-84 ellipsoid parameters drive the geodetic
    conversion. Visibility uses a spherical Earth of mean radius 6371 km.

Sample TLE Data:
    Element sets for Indian and ESA Earth-observation satellites, used for
    demonstrations and tests when live data is unavailable.

    IMPORTANT: These are illustrative elements with epoch 2024-01-15.
    Fetch current elements from CelesTrak or Space-Track for real tracking.

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import os
from typing import Dict, Any

# WGS-72 Gravitational Constants (per Vallado et al. 2006, AAS 06-675)
EARTH_RADIUS_KM: float = 6378.135  # Earth equatorial radius (km)
GRAVITATIONAL_PARAMETER: float = 398600.8  # Earth gravitational parameter (km³/s²)
J2: float = 0.00108262998905892  # Second zonal harmonic coefficient

# WGS-84 ellipsoid for geodetic coordinates
WGS84_A_KM: float = 6378.137
WGS84_F: float = 1.0 / 298.257223563

# Spherical Earth used by the visibility model
MEAN_EARTH_RADIUS_KM: float = 6371.0

# Kepler solver
KEPLER_TOLERANCE: float = 1e-8  # rad
KEPLER_MAX_ITER: int = 10

MINUTES_PER_DAY: float = 1440.0

# Pass search horizon, one day of one-minute steps
PASS_SEARCH_MINUTES: int = int(MINUTES_PER_DAY)

# Sample Earth-observation catalog
SATELLITE_TLES: Dict[str, Dict[str, Any]] = {
    'RESOURCESAT-2': {
        'name': 'RESOURCESAT-2',
        'norad_id': '37387',
        'provider': 'ISRO',
        'line1': '1 37387U 11015A   24015.50000000  .00000100  00000-0  10000-3 0  9998',
        'line2': '2 37387  98.7500  80.0000 0001000  90.0000 270.0000 14.21500000100000',
    },
    'SENTINEL-2A': {
        'name': 'SENTINEL-2A',
        'norad_id': '40697',
        'provider': 'ESA',
        'line1': '1 40697U 15028A   24015.50000000  .00000050  00000-0  50000-4 0  9993',
        'line2': '2 40697  98.5680 100.5000 0001200  85.0000 275.0000 14.30820000100009',
    },
    'CARTOSAT-3': {
        'name': 'CARTOSAT-3',
        'norad_id': '44804',
        'provider': 'ISRO',
        'line1': '1 44804U 19089A   24015.50000000  .00000150  00000-0  15000-3 0  9999',
        'line2': '2 44804  97.5000  60.0000 0001500  95.0000 265.0000 15.19000000100009',
    },
    'OCEANSAT-3': {
        'name': 'OCEANSAT-3',
        'norad_id': '54358',
        'provider': 'ISRO',
        'line1': '1 54358U 22137A   24015.50000000  .00000080  00000-0  80000-4 0  9997',
        'line2': '2 54358  98.3000  90.0000 0001100  88.0000 272.0000 14.25000000100008',
    },
    'RISAT-2BR1': {
        'name': 'RISAT-2BR1',
        'norad_id': '44857',
        'provider': 'ISRO',
        'line1': '1 44857U 19089F   24015.50000000  .00000200  00000-0  20000-3 0  9999',
        'line2': '2 44857  37.0000  45.0000 0010000 100.0000 260.0000 15.08000000100004',
    },
    'SENTINEL-1A': {
        'name': 'SENTINEL-1A',
        'norad_id': '39634',
        'provider': 'ESA',
        'line1': '1 39634U 14016A   24015.50000000  .00000040  00000-0  40000-4 0  9996',
        'line2': '2 39634  98.1820  95.0000 0001300  82.0000 278.0000 14.59200000100002',
    },
}


class TrackerConfig:
    """Runtime defaults, overridable through the environment."""

    OBSERVER_LAT = float(os.getenv('OBSERVER_LAT', '28.6139'))
    OBSERVER_LON = float(os.getenv('OBSERVER_LON', '77.209'))
    OBSERVER_ALT_KM = float(os.getenv('OBSERVER_ALT_KM', '0.0'))
    MIN_ELEVATION_DEG = float(os.getenv('MIN_ELEVATION_DEG', '10.0'))
    OVERHEAD_SWATH_KM = float(os.getenv('OVERHEAD_SWATH_KM', '500.0'))
    GROUND_TRACK_WINDOW_MIN = float(os.getenv('GROUND_TRACK_WINDOW_MIN', '120'))
    GROUND_TRACK_STEP_MIN = float(os.getenv('GROUND_TRACK_STEP_MIN', '2'))
    PROPAGATION_MODEL = os.getenv('PROPAGATION_MODEL', 'j2')
    API_PORT = int(os.getenv('API_PORT', '5001'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_FILE = os.getenv('LOG_FILE') or None
