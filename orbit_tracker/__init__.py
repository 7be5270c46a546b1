"""
Orbit Tracker Package

Real-time satellite position, ground track and pass prediction from
Two-Line Element sets, for consumption by a visualization front end.

Modules:
    tle_parser: TLE parsing, checksum validation and line reconstruction
    propagator: Two-body + J2 secular propagation and the SGP4 model
    coordinates: ECI to ECEF to geodetic transformations
    ground_track: Time-window sampling of geodetic positions
    visibility: Surface distance, elevation and overhead checks
    pass_predictor: Forward scan for the next above-threshold pass
    tracker: Catalog facade with position caching and status snapshots
    api: Flask JSON query interface

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
"""

from orbit_tracker.errors import (
    OrbitTrackerError,
    MalformedRecord,
    PropagationDivergence,
    InvalidState,
    InvalidParameters,
)
from orbit_tracker.models import (
    TLEElement,
    StateVector,
    GeodeticPosition,
    GroundTrack,
    PassPrediction,
    ObserverLocation,
)
from orbit_tracker.tle_parser import parse_tle, parse_tle_catalog
from orbit_tracker.propagator import (
    PropagationModel,
    SimplifiedJ2Model,
    SGP4Model,
    propagate,
)
from orbit_tracker.coordinates import eci_to_geodetic
from orbit_tracker.ground_track import ground_track
from orbit_tracker.visibility import surface_distance, elevation, is_over_location
from orbit_tracker.pass_predictor import next_pass
from orbit_tracker.tracker import SatelliteTracker

__version__ = "1.0.0"
