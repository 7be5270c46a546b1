"""
Ground Track Sampler

Drives the propagator and the coordinate transformer across a time window
centered on a reference instant, producing the sub-satellite trail.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import List

from orbit_tracker.coordinates import as_utc, eci_to_geodetic
from orbit_tracker.errors import InvalidParameters
from orbit_tracker.models import GroundTrack, TLEElement
from orbit_tracker.propagator import PropagationModel, propagate

logger = logging.getLogger(__name__)


def sample_instants(center_time: datetime, window_minutes: float, step_minutes: float) -> List[datetime]:
    """
    Evenly spaced instants from center - window/2 to center + window/2 inclusive.

    Raises:
        InvalidParameters: step_minutes <= 0 or window_minutes < 0
    """
    if not (math.isfinite(step_minutes) and step_minutes > 0):
        raise InvalidParameters(f"step_minutes must be positive, got {step_minutes}")
    if not (math.isfinite(window_minutes) and window_minutes >= 0):
        raise InvalidParameters(f"window_minutes must be non-negative, got {window_minutes}")

    start = as_utc(center_time) - timedelta(minutes=window_minutes / 2.0)
    # Tolerance keeps e.g. 120 / 2 from truncating to 59.999...
    count = int(math.floor(window_minutes / step_minutes + 1e-9)) + 1

    return [start + timedelta(minutes=k * step_minutes) for k in range(count)]


def ground_track(elements: TLEElement, center_time: datetime, window_minutes: float = 90.0,
                 step_minutes: float = 1.0, model: PropagationModel = None) -> GroundTrack:
    """
    Compute the ground track of a satellite around `center_time`.

    Args:
        elements: Parsed TLE elements
        center_time: Middle of the sampling window
        window_minutes: Total window length (minutes)
        step_minutes: Spacing between samples (minutes)
        model: Propagation model, SimplifiedJ2Model by default

    Returns:
        List of GeodeticPosition, one per instant, in time order
    """
    instants = sample_instants(center_time, window_minutes, step_minutes)

    track = [eci_to_geodetic(propagate(elements, t, model), t) for t in instants]

    logger.debug(
        f"Ground track for {elements.name}: {len(track)} samples, "
        f"window {window_minutes} min, step {step_minutes} min"
    )
    return track
