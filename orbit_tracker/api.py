"""
Orbit Tracker Query API

JSON query interface consumed by the visualization front end: live
positions, ground tracks, next-pass predictions and overhead status for a
catalog of satellites. The front end polls these endpoints on its own
cadence; nothing is pushed.

Usage:
    python -m orbit_tracker.api
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog
from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import BaseModel

from config import TrackerConfig
from logging_config import configure_from_env
from orbit_tracker.errors import InvalidParameters
from orbit_tracker.models import GeodeticPosition, PassPrediction
from orbit_tracker.tracker import SatelliteTracker, format_countdown

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


class PositionModel(BaseModel):
    """Geodetic position of a satellite"""
    timestamp: datetime
    latitude: float
    longitude: float
    altitude_km: float
    velocity_kms: float

    @classmethod
    def from_position(cls, position: GeodeticPosition) -> "PositionModel":
        return cls(
            timestamp=position.timestamp,
            latitude=position.latitude,
            longitude=position.longitude,
            altitude_km=position.altitude,
            velocity_kms=position.velocity,
        )


class PassModel(BaseModel):
    """Next pass over the observer"""
    start: datetime
    max_elevation_deg: float
    countdown: str


class SatelliteStatusModel(BaseModel):
    """Display snapshot for one satellite"""
    norad_id: str
    name: str
    provider: str
    status: str
    next_pass: str
    position: Optional[PositionModel] = None
    ground_track: List[PositionModel] = []


def _query_time(name: str = "timestamp") -> datetime:
    value = request.args.get(name)
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise InvalidParameters(f"Invalid {name}: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _query_float(name: str, default: float) -> float:
    value = request.args.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise InvalidParameters(f"Invalid {name}: {value!r}")


def _pass_model(now: datetime, prediction: PassPrediction) -> PassModel:
    return PassModel(
        start=prediction.start,
        max_elevation_deg=prediction.max_elevation,
        countdown=format_countdown(now, prediction.start),
    )


def create_app(tracker: Optional[SatelliteTracker] = None) -> Flask:
    """
    Build the Flask application around a tracker.

    Args:
        tracker: Tracker to serve; defaults to one loaded with the sample catalog
    """
    if tracker is None:
        tracker = SatelliteTracker()
        tracker.load_sample_catalog()

    app = Flask(__name__)
    CORS(app)
    app.config["TRACKER"] = tracker

    def not_found(norad_id: str):
        return jsonify({"error": f"Satellite {norad_id} not found"}), 404

    @app.errorhandler(InvalidParameters)
    def handle_invalid_parameters(error):
        logger.warning("invalid_parameters", error=str(error), path=request.path)
        return jsonify({"error": str(error)}), 400

    @app.route('/health', methods=['GET'])
    def health_check():
        """Service health"""
        return jsonify({
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "satellites_loaded": len(tracker.satellites),
            "propagation_model": tracker.model.name,
            "observer": {
                "latitude": tracker.observer.latitude,
                "longitude": tracker.observer.longitude,
                "altitude_km": tracker.observer.altitude,
            },
        }), 200

    @app.route('/satellites', methods=['GET'])
    def list_satellites():
        """Loaded element sets"""
        satellites = [
            dict(entry["elements"].to_dict(), provider=entry["provider"])
            for entry in tracker.satellites.values()
        ]
        return jsonify({"satellites": satellites, "count": len(satellites)})

    @app.route('/satellites/<norad_id>/position', methods=['GET'])
    def get_position(norad_id: str):
        """Current (or requested) position; null when it cannot be computed"""
        if norad_id not in tracker.satellites:
            return not_found(norad_id)

        position = tracker.position(norad_id, _query_time())
        if position is None:
            logger.warning("position_unavailable", norad_id=norad_id)
            return jsonify({"norad_id": norad_id, "position": None})

        return jsonify({
            "norad_id": norad_id,
            "position": PositionModel.from_position(position).model_dump(mode="json"),
        })

    @app.route('/satellites/<norad_id>/ground-track', methods=['GET'])
    def get_ground_track(norad_id: str):
        """Ground track centered on the requested time"""
        if norad_id not in tracker.satellites:
            return not_found(norad_id)

        window = _query_float("window", TrackerConfig.GROUND_TRACK_WINDOW_MIN)
        step = _query_float("step", TrackerConfig.GROUND_TRACK_STEP_MIN)
        track = tracker.ground_track(norad_id, _query_time(), window, step)

        return jsonify({
            "norad_id": norad_id,
            "window_minutes": window,
            "step_minutes": step,
            "count": len(track),
            "ground_track": [PositionModel.from_position(p).model_dump(mode="json") for p in track],
        })

    @app.route('/satellites/<norad_id>/next-pass', methods=['GET'])
    def get_next_pass(norad_id: str):
        """Next pass over the observer within 24 hours"""
        if norad_id not in tracker.satellites:
            return not_found(norad_id)

        now = _query_time()
        threshold = _query_float("min_elevation", tracker.min_elevation_deg)
        prediction = tracker.next_pass(norad_id, now, threshold)

        return jsonify({
            "norad_id": norad_id,
            "min_elevation_deg": threshold,
            "next_pass": _pass_model(now, prediction).model_dump(mode="json") if prediction else None,
        })

    @app.route('/satellites/<norad_id>/overhead', methods=['GET'])
    def get_overhead(norad_id: str):
        """Whether the observer lies inside the satellite's swath"""
        if norad_id not in tracker.satellites:
            return not_found(norad_id)

        swath = _query_float("swath", tracker.swath_width_km)
        return jsonify({
            "norad_id": norad_id,
            "swath_width_km": swath,
            "overhead": tracker.is_overhead(norad_id, _query_time(), swath),
        })

    @app.route('/snapshot', methods=['GET'])
    def get_snapshot():
        """Status of every loaded satellite"""
        include_track = request.args.get("ground_track", "true").lower() != "false"
        snapshots = tracker.snapshot(_query_time(), include_ground_track=include_track)

        satellites = [
            SatelliteStatusModel(
                norad_id=s.norad_id,
                name=s.name,
                provider=s.provider,
                status=s.status,
                next_pass=s.next_pass,
                position=PositionModel.from_position(s.position) if s.position else None,
                ground_track=[PositionModel.from_position(p) for p in s.ground_track],
            ).model_dump(mode="json")
            for s in snapshots
        ]
        return jsonify({"satellites": satellites, "count": len(satellites)})

    return app


if __name__ == '__main__':
    configure_from_env()
    logger.info("Starting orbit tracker API", port=TrackerConfig.API_PORT)
    create_app().run(host='0.0.0.0', port=TrackerConfig.API_PORT, debug=False)
