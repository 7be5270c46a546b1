"""
Satellite Tracker

Catalog facade over the pure engine functions, serving the query interface
a visualization front end polls on its own cadence.

Features:
- Load and replace element sets keyed by NORAD catalog number
- Live positions with an optional "last computed result" cache
- Ground tracks, next-pass predictions and overhead checks
- Per-satellite status snapshots with a next-pass countdown label
- Error history for satellites whose propagation failed

Failed computations surface as an absence of data (None or an empty track),
never as a stale or zeroed coordinate. Malformed element sets and bad
sampling parameters are raised to the caller.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from config import MINUTES_PER_DAY, SATELLITE_TLES, TrackerConfig
from orbit_tracker.coordinates import as_utc, eci_to_geodetic
from orbit_tracker.errors import InvalidParameters, OrbitTrackerError
from orbit_tracker.ground_track import ground_track
from orbit_tracker.models import (
    GeodeticPosition,
    GroundTrack,
    ObserverLocation,
    PassPrediction,
    TLEElement,
)
from orbit_tracker.pass_predictor import next_pass
from orbit_tracker.propagator import (
    PropagationModel,
    get_propagation_model,
    propagate,
    state_to_orbital_elements,
)
from orbit_tracker.tle_parser import parse_tle, parse_tle_catalog
from orbit_tracker.visibility import is_over_location

logger = logging.getLogger(__name__)

MAX_ERROR_HISTORY = 100

STATUS_PASSING = "passing"
STATUS_HORIZON = "horizon"
STATUS_ACTIVE = "active"


def format_countdown(now: datetime, start: datetime) -> str:
    """
    Human-readable time until a pass starts.

    Under an hour: "42m"; under a day: "3h 5m"; otherwise the UTC clock time.
    """
    diff_minutes = max(0, math.floor((as_utc(start) - as_utc(now)).total_seconds() / 60.0))

    if diff_minutes < 60:
        return f"{diff_minutes}m"
    if diff_minutes < MINUTES_PER_DAY:
        return f"{diff_minutes // 60}h {diff_minutes % 60}m"
    return as_utc(start).strftime("%H:%M") + " UTC"


def _round_to_second(dt: datetime) -> datetime:
    dt = as_utc(dt)
    rounded = dt.replace(microsecond=0)
    if dt.microsecond >= 500000:
        rounded += timedelta(seconds=1)
    return rounded


@dataclass
class TrackedSatellite:
    """Display snapshot for one satellite."""

    norad_id: str
    name: str
    provider: str
    position: Optional[GeodeticPosition]
    ground_track: GroundTrack = field(default_factory=list)
    status: str = STATUS_ACTIVE
    next_pass: str = "--:--"
    pass_prediction: Optional[PassPrediction] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "norad_id": self.norad_id,
            "name": self.name,
            "provider": self.provider,
            "position": self.position.to_dict() if self.position else None,
            "ground_track": [p.to_dict() for p in self.ground_track],
            "status": self.status,
            "next_pass": self.next_pass,
            "pass_prediction": self.pass_prediction.to_dict() if self.pass_prediction else None,
        }


class SatelliteTracker:
    """
    Tracks a catalog of satellites for one observer.

    The propagation model is fixed at construction; every query goes through
    the same model so positions, tracks and passes stay consistent.
    """

    def __init__(self, observer: Optional[ObserverLocation] = None,
                 model: Optional[PropagationModel] = None,
                 cache_positions: bool = True,
                 min_elevation_deg: float = TrackerConfig.MIN_ELEVATION_DEG,
                 swath_width_km: float = TrackerConfig.OVERHEAD_SWATH_KM):
        """
        Initialize the tracker.

        Args:
            observer: Ground observer (default from TrackerConfig)
            model: Propagation model (default from TrackerConfig.PROPAGATION_MODEL)
            cache_positions: Keep the last computed position per satellite
            min_elevation_deg: Pass threshold
            swath_width_km: Swath used for the overhead check
        """
        self.observer = observer or ObserverLocation(
            TrackerConfig.OBSERVER_LAT,
            TrackerConfig.OBSERVER_LON,
            TrackerConfig.OBSERVER_ALT_KM,
        )
        self.model = model or get_propagation_model(TrackerConfig.PROPAGATION_MODEL)
        self.cache_positions = cache_positions
        self.min_elevation_deg = min_elevation_deg
        self.swath_width_km = swath_width_km

        self.satellites: Dict[str, Dict[str, Any]] = {}
        self.cache: Dict[str, Tuple[datetime, GeodeticPosition]] = {}
        self.error_history: Dict[str, List[Dict[str, Any]]] = {}

    def load_satellite(self, line1: str, line2: str, name: Optional[str] = None,
                       provider: str = "Unknown") -> str:
        """
        Load (or wholesale replace) a satellite from TLE lines.

        Raises:
            MalformedRecord: the element set is unusable
        """
        elements = parse_tle(line1, line2, name or "")
        return self.add_elements(elements, provider)

    def add_elements(self, elements: TLEElement, provider: str = "Unknown") -> str:
        norad_id = elements.norad_id
        self.satellites[norad_id] = {
            "elements": elements,
            "provider": provider,
        }
        self._invalidate(norad_id)
        logger.info(f"Loaded {elements.name} ({norad_id}), epoch {elements.epoch.isoformat()}")
        return norad_id

    def load_catalog(self, text: str, provider: str = "Unknown") -> List[str]:
        """Load every record of a two- or three-line TLE catalog."""
        return [self.add_elements(el, provider) for el in parse_tle_catalog(text).values()]

    def load_sample_catalog(self) -> List[str]:
        """Load the built-in Earth-observation catalog from config."""
        return [
            self.load_satellite(entry["line1"], entry["line2"], entry["name"], entry["provider"])
            for entry in SATELLITE_TLES.values()
        ]

    def get_elements(self, norad_id: str) -> TLEElement:
        norad_id = str(norad_id)
        if norad_id not in self.satellites:
            raise ValueError(f"Satellite {norad_id} not loaded")
        return self.satellites[norad_id]["elements"]

    def position(self, norad_id: str, timestamp: Optional[datetime] = None) -> Optional[GeodeticPosition]:
        """
        Geodetic position of a satellite, or None if it cannot be computed.

        With caching enabled the instant is rounded to the nearest second and
        the last computed position of each satellite is kept; a query for the
        same second returns it without propagating.
        """
        elements = self.get_elements(norad_id)
        timestamp = as_utc(timestamp or datetime.now(timezone.utc))

        if self.cache_positions:
            timestamp = _round_to_second(timestamp)
            cached = self.cache.get(elements.norad_id)
            if cached is not None and cached[0] == timestamp:
                return cached[1]

        try:
            result = eci_to_geodetic(propagate(elements, timestamp, self.model), timestamp)
        except OrbitTrackerError as e:
            self._log_error(elements.norad_id, e, timestamp)
            return None

        if self.cache_positions:
            self.cache[elements.norad_id] = (timestamp, result)
        return result

    def ground_track(self, norad_id: str, center_time: Optional[datetime] = None,
                     window_minutes: float = TrackerConfig.GROUND_TRACK_WINDOW_MIN,
                     step_minutes: float = TrackerConfig.GROUND_TRACK_STEP_MIN) -> GroundTrack:
        """
        Ground track around `center_time`; empty if propagation fails.

        Raises:
            InvalidParameters: bad window or step
        """
        elements = self.get_elements(norad_id)
        center_time = as_utc(center_time or datetime.now(timezone.utc))

        try:
            return ground_track(elements, center_time, window_minutes, step_minutes, self.model)
        except InvalidParameters:
            raise
        except OrbitTrackerError as e:
            self._log_error(elements.norad_id, e, center_time)
            return []

    def next_pass(self, norad_id: str, reference_time: Optional[datetime] = None,
                  min_elevation_deg: Optional[float] = None) -> Optional[PassPrediction]:
        """Next pass over the tracker's observer, or None."""
        elements = self.get_elements(norad_id)
        reference_time = as_utc(reference_time or datetime.now(timezone.utc))
        threshold = self.min_elevation_deg if min_elevation_deg is None else min_elevation_deg

        try:
            return next_pass(elements, self.observer, threshold, reference_time, self.model)
        except InvalidParameters:
            raise
        except OrbitTrackerError as e:
            self._log_error(elements.norad_id, e, reference_time)
            return None

    def is_overhead(self, norad_id: str, timestamp: Optional[datetime] = None,
                    swath_width_km: Optional[float] = None) -> bool:
        """True when the observer is inside the satellite's swath; False without data."""
        position = self.position(norad_id, timestamp)
        if position is None:
            return False
        swath = self.swath_width_km if swath_width_km is None else swath_width_km
        return is_over_location(position, self.observer, swath)

    def snapshot(self, timestamp: Optional[datetime] = None,
                 include_ground_track: bool = True) -> List[TrackedSatellite]:
        """
        Display snapshot of every loaded satellite.

        Status is "passing" when overhead now, "horizon" when the next pass
        starts within the hour, and "active" otherwise.
        """
        now = as_utc(timestamp or datetime.now(timezone.utc))
        snapshots = []

        for norad_id, entry in self.satellites.items():
            elements = entry["elements"]
            position = self.position(norad_id, now)
            track = self.ground_track(norad_id, now) if include_ground_track else []

            tracked = TrackedSatellite(
                norad_id=norad_id,
                name=elements.name,
                provider=entry["provider"],
                position=position,
                ground_track=track,
            )

            if position is not None:
                if is_over_location(position, self.observer, self.swath_width_km):
                    tracked.status = STATUS_PASSING
                    tracked.next_pass = "NOW"
                else:
                    prediction = self.next_pass(norad_id, now)
                    if prediction is not None:
                        tracked.pass_prediction = prediction
                        tracked.next_pass = format_countdown(now, prediction.start)
                        if prediction.start - now < timedelta(minutes=60):
                            tracked.status = STATUS_HORIZON

            snapshots.append(tracked)

        return snapshots

    def osculating_elements(self, norad_id: str, timestamp: Optional[datetime] = None) -> Dict[str, float]:
        """Osculating classical elements of the propagated state (angles in degrees)."""
        elements = self.get_elements(norad_id)
        state = propagate(elements, as_utc(timestamp or elements.epoch), self.model)
        osc = state_to_orbital_elements(state.position, state.velocity)

        return {
            "semi_major_axis_km": osc["a"],
            "eccentricity": osc["e"],
            "inclination_deg": math.degrees(osc["i"]),
            "raan_deg": math.degrees(osc["raan"]),
            "arg_perigee_deg": math.degrees(osc["argp"]),
            "true_anomaly_deg": math.degrees(osc["nu"]),
            "mean_anomaly_deg": math.degrees(osc["M"]),
        }

    def get_error_history(self, norad_id: str) -> List[Dict[str, Any]]:
        return self.error_history.get(str(norad_id), [])

    def _invalidate(self, norad_id: str) -> None:
        self.cache.pop(norad_id, None)

    def _log_error(self, norad_id: str, error: Exception, timestamp: datetime) -> None:
        """Log error for tracking and diagnostics."""
        logger.warning(f"No data for satellite {norad_id} at {timestamp.isoformat()}: {error}")

        history = self.error_history.setdefault(norad_id, [])
        history.append({
            "error_type": type(error).__name__,
            "error_message": str(error),
            "timestamp": timestamp.isoformat(),
        })

        # Keep only last 100 errors
        if len(history) > MAX_ERROR_HISTORY:
            self.error_history[norad_id] = history[-MAX_ERROR_HISTORY:]
