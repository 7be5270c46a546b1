"""
Data model for the orbit tracker.

All records are immutable. A TLEElement is created once from parsed text and
replaced wholesale when new data arrives; state vectors and geodetic positions
are derived per query and never stored by the engine.
"""

import math
import numpy as np
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from config import MINUTES_PER_DAY
from orbit_tracker.errors import MalformedRecord

TWOPI = 2.0 * math.pi


@dataclass(frozen=True)
class TLEElement:
    """
    Mean orbital elements decoded from a Two-Line Element set.

    Angles are stored in degrees as they appear in the TLE; the radian
    properties are what the propagator consumes.
    """

    norad_id: str
    epoch: datetime
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    ndot: float = 0.0
    nddot: float = 0.0
    bstar: float = 0.0
    name: str = ""
    classification: str = "U"
    international_designator: str = ""
    element_number: int = 0
    revolution_number: int = 0
    line1: str = field(default="", repr=False)
    line2: str = field(default="", repr=False)

    def __post_init__(self):
        if not 0.0 <= self.eccentricity < 1.0:
            raise MalformedRecord(
                f"Eccentricity {self.eccentricity} outside [0, 1) for {self.norad_id}"
            )
        if not self.mean_motion_rev_per_day > 0.0:
            raise MalformedRecord(
                f"Mean motion {self.mean_motion_rev_per_day} must be positive for {self.norad_id}"
            )

    @property
    def inclination(self) -> float:
        return math.radians(self.inclination_deg)

    @property
    def raan(self) -> float:
        return math.radians(self.raan_deg)

    @property
    def arg_perigee(self) -> float:
        return math.radians(self.arg_perigee_deg)

    @property
    def mean_anomaly(self) -> float:
        return math.radians(self.mean_anomaly_deg)

    @property
    def mean_motion(self) -> float:
        """Mean motion in rad/min."""
        return self.mean_motion_rev_per_day * TWOPI / MINUTES_PER_DAY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "norad_id": self.norad_id,
            "name": self.name,
            "epoch": self.epoch.isoformat(),
            "inclination_deg": self.inclination_deg,
            "raan_deg": self.raan_deg,
            "eccentricity": self.eccentricity,
            "arg_perigee_deg": self.arg_perigee_deg,
            "mean_anomaly_deg": self.mean_anomaly_deg,
            "mean_motion_rev_per_day": self.mean_motion_rev_per_day,
            "ndot": self.ndot,
            "nddot": self.nddot,
            "bstar": self.bstar,
        }


@dataclass(frozen=True, eq=False)
class StateVector:
    """ECI position (km) and velocity (km/s) at a specific instant."""

    position: np.ndarray
    velocity: np.ndarray
    timestamp: datetime

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.position)) and np.all(np.isfinite(self.velocity)))

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.position))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


@dataclass(frozen=True)
class GeodeticPosition:
    """Latitude/longitude (deg), altitude above WGS-84 (km) and speed (km/s)."""

    latitude: float
    longitude: float
    altitude: float
    velocity: float = 0.0
    timestamp: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude_km": self.altitude,
            "velocity_kms": self.velocity,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


# Ordered, eagerly computed samples with strictly increasing timestamps
GroundTrack = List[GeodeticPosition]


@dataclass(frozen=True)
class PassPrediction:
    """Start of the next qualifying pass and the peak elevation seen during it."""

    start: datetime
    max_elevation: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "max_elevation_deg": self.max_elevation,
        }


@dataclass(frozen=True)
class ObserverLocation:
    """Ground observer in geodetic degrees and km."""

    latitude: float
    longitude: float
    altitude: float = 0.0
