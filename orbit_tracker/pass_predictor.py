"""
Pass Predictor

Forward minute-by-minute scan for the next interval where a satellite's
elevation over an observer reaches a threshold.

The scan is a two-state machine:

    SEARCHING --(elevation >= threshold)--> IN_PASS
    IN_PASS   --(elevation <  threshold)--> found

It returns the start of the first qualifying pass together with the peak
elevation observed before the threshold was next violated. A pass still in
progress when the horizon runs out has no known peak and is not reported.
The scan has no early exit besides finding a pass or exhausting the
horizon; callers that need cancellation must impose their own deadline.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from config import PASS_SEARCH_MINUTES
from orbit_tracker.coordinates import as_utc, eci_to_geodetic
from orbit_tracker.errors import InvalidParameters
from orbit_tracker.models import PassPrediction, TLEElement
from orbit_tracker.propagator import PropagationModel, propagate
from orbit_tracker.visibility import elevation

logger = logging.getLogger(__name__)


class PassState(Enum):
    """Pass search states"""

    SEARCHING = "SEARCHING"
    IN_PASS = "IN_PASS"


def elevation_at(elements: TLEElement, observer, at: datetime,
                 model: PropagationModel = None) -> float:
    """Elevation (deg) of the satellite over `observer` at `at`."""
    subpoint = eci_to_geodetic(propagate(elements, at, model), at)
    return elevation(observer, subpoint)


def next_pass(elements: TLEElement, observer, min_elevation_deg: float = 10.0,
              reference_time: Optional[datetime] = None, model: PropagationModel = None,
              horizon_minutes: int = PASS_SEARCH_MINUTES) -> Optional[PassPrediction]:
    """
    Find the next pass above `min_elevation_deg` after `reference_time`.

    Args:
        elements: Parsed TLE elements
        observer: Object with latitude, longitude and altitude (km)
        min_elevation_deg: Elevation threshold (degrees)
        reference_time: Scan start (default: now)
        model: Propagation model, SimplifiedJ2Model by default
        horizon_minutes: Number of one-minute steps to scan (default 1440)

    Returns:
        PassPrediction, or None if no pass both starts and ends within the horizon

    Raises:
        InvalidParameters: non-finite threshold or non-positive horizon
        PropagationDivergence, InvalidState: propagation failed mid-scan
    """
    if not math.isfinite(min_elevation_deg):
        raise InvalidParameters(f"min_elevation_deg must be finite, got {min_elevation_deg}")
    if horizon_minutes <= 0:
        raise InvalidParameters(f"horizon_minutes must be positive, got {horizon_minutes}")

    reference_time = as_utc(reference_time or datetime.now(timezone.utc))

    state = PassState.SEARCHING
    pass_start = None
    max_elevation = 0.0

    for minute in range(horizon_minutes):
        t = reference_time + timedelta(minutes=minute)
        current = elevation_at(elements, observer, t, model)

        if state is PassState.SEARCHING:
            if current >= min_elevation_deg:
                state = PassState.IN_PASS
                pass_start = t
                max_elevation = current
        elif current >= min_elevation_deg:
            max_elevation = max(max_elevation, current)
        else:
            logger.debug(
                f"Next pass of {elements.name}: {pass_start.isoformat()}, "
                f"peak {max_elevation:.1f} deg"
            )
            return PassPrediction(start=pass_start, max_elevation=max_elevation)

    logger.debug(f"No pass of {elements.name} above {min_elevation_deg} deg within {horizon_minutes} min")
    return None
