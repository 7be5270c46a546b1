"""
Orbital Propagator Module

Propagates TLE mean elements to an Earth-Centered Inertial state vector.

Two interchangeable propagation models are provided:

- SimplifiedJ2Model (default): two-body Keplerian motion with closed-form
  J2 secular drift of the ascending node, argument of perigee and mean
  anomaly. Adequate for near-circular LEO satellites over multi-day
  horizons; accuracy degrades for highly eccentric or geosynchronous
  orbits, and atmospheric drag is not modeled.
- SGP4Model: the NORAD SGP4/SDP4 model through the proven sgp4 library.
  Its TEME output is treated as ECI.

Both produce a StateVector, so the coordinate transformer, ground track
sampler and pass predictor are agnostic to which model was used.

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import logging
import math
from datetime import datetime
from functools import lru_cache
from typing import Dict, Tuple

import numpy as np
from sgp4.api import Satrec

from config import (
    EARTH_RADIUS_KM,
    GRAVITATIONAL_PARAMETER,
    J2,
    KEPLER_MAX_ITER,
    KEPLER_TOLERANCE,
)
from orbit_tracker.coordinates import as_utc, datetime_to_jd_fr
from orbit_tracker.errors import InvalidParameters, InvalidState, PropagationDivergence
from orbit_tracker.models import StateVector, TLEElement
from orbit_tracker.tle_parser import element_to_lines

logger = logging.getLogger(__name__)

TWOPI = 2.0 * math.pi
MU_KM3_MIN2 = GRAVITATIONAL_PARAMETER * 3600.0  # km^3/min^2

# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Satellite has decayed",
    6: "Satellite has decayed (low altitude)",
}


def minutes_since_epoch(elements: TLEElement, at: datetime) -> float:
    """Elapsed time from the element epoch to `at`, in minutes."""
    return (as_utc(at) - elements.epoch).total_seconds() / 60.0


def semi_major_axis_from_mean_motion(mean_motion_rad_min: float) -> float:
    """
    Kepler's third law: a = (mu / n^2)^(1/3).

    Args:
        mean_motion_rad_min: Mean motion (rad/min)

    Returns:
        Semi-major axis (km)
    """
    return (MU_KM3_MIN2 / mean_motion_rad_min ** 2) ** (1.0 / 3.0)


def j2_secular_rates(a: float, e: float, i: float, n: float) -> Tuple[float, float, float]:
    """
    Secular rates caused by Earth's oblateness (J2).

    With p = a(1 - e^2) and k = J2 (Re / p)^2:

        dot(RAAN) = -1.5 k n cos(i)
        dot(argp) = 0.75 k n (5 cos^2(i) - 1)
        dot(M)    = n (1 + 0.75 k sqrt(1 - e^2) (3 cos^2(i) - 1))

    Args:
        a: Semi-major axis (km)
        e: Eccentricity
        i: Inclination (rad)
        n: Unperturbed mean motion (rad/min)

    Returns:
        Tuple of (raan_rate, argp_rate, mean_anomaly_rate) in rad/min
    """
    p = a * (1.0 - e * e)
    k = J2 * (EARTH_RADIUS_KM / p) ** 2
    cos_i = math.cos(i)
    cos2_i = cos_i * cos_i

    raan_rate = -1.5 * k * n * cos_i
    argp_rate = 0.75 * k * n * (5.0 * cos2_i - 1.0)
    mean_anomaly_rate = n * (1.0 + 0.75 * k * math.sqrt(1.0 - e * e) * (3.0 * cos2_i - 1.0))

    return raan_rate, argp_rate, mean_anomaly_rate


def solve_kepler_equation(M: float, e: float, tolerance: float = KEPLER_TOLERANCE,
                          max_iter: int = KEPLER_MAX_ITER) -> float:
    """
    Solve Kepler's equation M = E - e sin(E) for eccentric anomaly.

    Args:
        M: Mean anomaly (rad)
        e: Eccentricity
        tolerance: Residual tolerance (rad)
        max_iter: Maximum Newton-Raphson iterations

    Returns:
        Eccentric anomaly E (rad)

    Raises:
        PropagationDivergence: residual still above tolerance after max_iter
    """
    # Initial guess
    if e < 0.8:
        E = M + e * math.sin(M)
    else:
        E = math.pi

    for _ in range(max_iter):
        f = E - e * math.sin(E) - M
        if abs(f) <= tolerance:
            return E

        fp = 1.0 - e * math.cos(E)
        E = E - f / fp

    residual = E - e * math.sin(E) - M
    if abs(residual) <= tolerance:
        return E

    logger.error(f"Kepler solver diverged: M={M}, e={e}, residual {residual:.3e}")
    raise PropagationDivergence(
        f"Kepler solver did not converge for M={M}, e={e} "
        f"(residual {residual:.3e} rad after {max_iter} iterations)"
    )


def perifocal_to_eci(raan: float, i: float, argp: float) -> np.ndarray:
    """Rotation matrix R3(-RAAN) R1(-i) R3(-argp) from the orbital plane to ECI."""
    cos_raan = math.cos(raan)
    sin_raan = math.sin(raan)
    cos_i = math.cos(i)
    sin_i = math.sin(i)
    cos_argp = math.cos(argp)
    sin_argp = math.sin(argp)

    R_raan = np.array([
        [cos_raan, -sin_raan, 0.0],
        [sin_raan, cos_raan, 0.0],
        [0.0, 0.0, 1.0]
    ])

    R_i = np.array([
        [1.0, 0.0, 0.0],
        [0.0, cos_i, -sin_i],
        [0.0, sin_i, cos_i]
    ])

    R_argp = np.array([
        [cos_argp, -sin_argp, 0.0],
        [sin_argp, cos_argp, 0.0],
        [0.0, 0.0, 1.0]
    ])

    return R_raan @ R_i @ R_argp


def state_to_orbital_elements(r: np.ndarray, v: np.ndarray) -> Dict[str, float]:
    """
    Osculating classical elements of an ECI state.

    Angles come from atan2 in the orbital plane, measured from the
    ascending node. Equatorial orbits take the x axis as the node and
    circular orbits take the node as perigee.

    Args:
        r: Position (km)
        v: Velocity (km/s)

    Returns:
        Dict with a (km), e, and i, raan, argp, nu, M (rad)

    Raises:
        InvalidState: the state is not a bound orbit
    """
    r = np.asarray(r, dtype=float)
    v = np.asarray(v, dtype=float)
    radius = float(np.linalg.norm(r))

    energy = float(np.dot(v, v)) / 2.0 - GRAVITATIONAL_PARAMETER / radius
    if energy >= 0.0:
        raise InvalidState(f"Unbound state (specific energy {energy:.3f} km^2/s^2)")
    a = -GRAVITATIONAL_PARAMETER / (2.0 * energy)

    h = np.cross(r, v)
    h_unit = h / np.linalg.norm(h)
    i = math.atan2(math.hypot(h[0], h[1]), h[2])

    raan = math.atan2(h[0], -h[1]) % TWOPI if math.hypot(h[0], h[1]) > 1e-10 else 0.0
    node = np.array([math.cos(raan), math.sin(raan), 0.0])
    in_plane = np.cross(h_unit, node)

    e_vec = np.cross(v, h) / GRAVITATIONAL_PARAMETER - r / radius
    e = float(np.linalg.norm(e_vec))

    argp = math.atan2(np.dot(e_vec, in_plane), np.dot(e_vec, node)) % TWOPI if e > 1e-10 else 0.0
    arg_latitude = math.atan2(np.dot(r, in_plane), np.dot(r, node))
    nu = (arg_latitude - argp) % TWOPI

    E = math.atan2(math.sqrt(1.0 - e * e) * math.sin(nu), e + math.cos(nu))
    M = (E - e * math.sin(E)) % TWOPI

    return {'a': a, 'e': e, 'i': i, 'raan': raan, 'argp': argp, 'nu': nu, 'M': M}


class PropagationModel:
    """
    Capability interface: mean elements + instant -> ECI state vector.

    Subclasses must be pure: identical inputs give identical outputs.
    """

    name = "abstract"

    def propagate(self, elements: TLEElement, at: datetime) -> StateVector:
        raise NotImplementedError


class SimplifiedJ2Model(PropagationModel):
    """Two-body Kepler propagation with J2 secular drift."""

    name = "j2"

    def propagate(self, elements: TLEElement, at: datetime) -> StateVector:
        at = as_utc(at)
        dt = minutes_since_epoch(elements, at)

        e = elements.eccentricity
        i = elements.inclination
        n0 = elements.mean_motion
        a = semi_major_axis_from_mean_motion(n0)

        raan_rate, argp_rate, mean_anomaly_rate = j2_secular_rates(a, e, i, n0)
        raan = elements.raan + raan_rate * dt
        argp = elements.arg_perigee + argp_rate * dt
        M = (elements.mean_anomaly + mean_anomaly_rate * dt) % TWOPI

        E = solve_kepler_equation(M, e)

        # True anomaly
        nu = 2 * math.atan2(
            math.sqrt(1 + e) * math.sin(E / 2),
            math.sqrt(1 - e) * math.cos(E / 2)
        )

        r_mag = a * (1 - e * math.cos(E))
        h = math.sqrt(GRAVITATIONAL_PARAMETER * a * (1 - e ** 2))

        r_op = np.array([r_mag * math.cos(nu), r_mag * math.sin(nu), 0.0])
        v_op = np.array([
            -GRAVITATIONAL_PARAMETER / h * math.sin(nu),
            GRAVITATIONAL_PARAMETER / h * (e + math.cos(nu)),
            0.0
        ])

        R = perifocal_to_eci(raan, i, argp)
        return StateVector(position=R @ r_op, velocity=R @ v_op, timestamp=at)


@lru_cache(maxsize=256)
def _load_satrec(line1: str, line2: str) -> Satrec:
    return Satrec.twoline2rv(line1, line2)


class SGP4Model(PropagationModel):
    """NORAD SGP4/SDP4 through the sgp4 library (TEME treated as ECI)."""

    name = "sgp4"

    def propagate(self, elements: TLEElement, at: datetime) -> StateVector:
        at = as_utc(at)

        line1, line2 = elements.line1, elements.line2
        if not (line1 and line2):
            line1, line2 = element_to_lines(elements)

        satellite = _load_satrec(line1, line2)
        jd, fr = datetime_to_jd_fr(at)
        error, position, velocity = satellite.sgp4(jd, fr)

        if error != 0:
            logger.debug(f"SGP4 error {error} for {elements.norad_id} at {at.isoformat()}")
            raise PropagationDivergence(
                f"SGP4 error {error} for satellite {elements.norad_id}: "
                f"{SGP4_ERROR_CODES.get(error, f'Unknown error code {error}')}"
            )

        return StateVector(position=np.array(position), velocity=np.array(velocity), timestamp=at)


PROPAGATION_MODELS = {
    SimplifiedJ2Model.name: SimplifiedJ2Model,
    SGP4Model.name: SGP4Model,
}

DEFAULT_MODEL = SimplifiedJ2Model()


def get_propagation_model(name: str) -> PropagationModel:
    """Resolve a propagation model by name ("j2" or "sgp4")."""
    try:
        return PROPAGATION_MODELS[name.lower()]()
    except KeyError:
        raise InvalidParameters(
            f"Unknown propagation model {name!r}; expected one of {sorted(PROPAGATION_MODELS)}"
        )


def propagate(elements: TLEElement, at: datetime, model: PropagationModel = None) -> StateVector:
    """
    Propagate elements to an ECI state vector at `at`.

    Args:
        elements: Parsed TLE elements
        at: Query instant (naive datetimes are taken as UTC)
        model: Propagation model, SimplifiedJ2Model by default

    Returns:
        StateVector with position (km) and velocity (km/s)

    Raises:
        PropagationDivergence: the model failed for this instant
        InvalidState: the model produced a non-finite state
    """
    model = model or DEFAULT_MODEL
    state = model.propagate(elements, at)

    if not state.is_finite():
        raise InvalidState(
            f"Non-finite state for satellite {elements.norad_id} at {state.timestamp.isoformat()}"
        )

    return state
