"""Keplerian position engine.

Planet positions follow the JPL "approximate positions of the planets"
recipe: elements at J2000 plus linear per-century rates, one Kepler solve,
then a rotation into the heliocentric ecliptic J2000 frame. Satellites reuse
the same solve with their own elements relative to the parent body.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from .config import SCENE_CFG, SceneCfg
from .timekeeping import Instant, epoch_millis, julian_day, quantize_to_second

if TYPE_CHECKING:  # pragma: no cover
    from .bodies import KeplerianElements, SatelliteOrbit

DAYS_PER_CENTURY = 36_525.0
KEPLER_TOLERANCE = 1e-8
KEPLER_MAX_ITERATIONS = 50


def norm360(degrees: float) -> float:
    """Normalise an angle in degrees to ``[0, 360)``."""

    return degrees % 360.0


def solve_kepler(
    mean_anomaly: float,
    eccentricity: float,
    *,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> float:
    """Solve ``E - e sin E = M`` for the eccentric anomaly ``E`` (radians).

    Newton-Raphson seeded at ``E = M``. If the iteration cap is hit the last
    iterate is returned as-is; for ``e`` close to 1 that is an approximation.
    """

    if not 0.0 <= eccentricity < 1.0:
        raise ValueError(f"eccentricity must be in [0, 1), got {eccentricity}")

    E = mean_anomaly
    for _ in range(max_iterations):
        f = E - eccentricity * math.sin(E) - mean_anomaly
        f_prime = 1.0 - eccentricity * math.cos(E)
        delta = f / f_prime
        E -= delta
        if abs(delta) <= tolerance:
            break
    return E


def julian_centuries(epoch_ms: float, cfg: SceneCfg = SCENE_CFG) -> float:
    """Julian centuries elapsed since the J2000.0 epoch."""

    return (julian_day(epoch_ms) - cfg.j2000_jd) / DAYS_PER_CENTURY


def query_millis(when: Instant) -> float:
    """Epoch milliseconds for a position query, rounded to the whole second."""

    return quantize_to_second(epoch_millis(when))


def _orbit_plane_position(
    E: float,
    eccentricity: float,
    semi_major_axis: float,
    arg_periapsis_deg: float,
    inclination_deg: float,
    node_deg: float,
) -> np.ndarray:
    cos_E = math.cos(E)
    denom = 1.0 - eccentricity * cos_E
    cos_v = (cos_E - eccentricity) / denom
    sin_v = math.sqrt(1.0 - eccentricity * eccentricity) * math.sin(E) / denom
    v = math.atan2(sin_v, cos_v)

    r = semi_major_axis * denom
    u = math.radians(arg_periapsis_deg) + v
    i = math.radians(inclination_deg)
    node = math.radians(node_deg)

    cos_u, sin_u = math.cos(u), math.sin(u)
    cos_n, sin_n = math.cos(node), math.sin(node)
    cos_i = math.cos(i)

    return np.array(
        [
            r * (cos_n * cos_u - sin_n * sin_u * cos_i),
            r * (sin_n * cos_u + cos_n * sin_u * cos_i),
            r * (sin_u * math.sin(i)),
        ],
        dtype=float,
    )


def heliocentric_position(
    elements: KeplerianElements,
    when: Instant,
    cfg: SceneCfg = SCENE_CFG,
) -> np.ndarray:
    """Heliocentric ecliptic J2000 position in km at ``when``."""

    T = julian_centuries(query_millis(when), cfg)

    a = elements.a + elements.a_dot * T
    e = elements.e + elements.e_dot * T
    inclination = elements.i + elements.i_dot * T
    mean_longitude = norm360(elements.L + elements.L_dot * T)
    long_peri = elements.long_peri + elements.long_peri_dot * T
    long_node = elements.long_node + elements.long_node_dot * T

    M = math.radians(norm360(mean_longitude - long_peri))
    E = solve_kepler(M, e)

    position_au = _orbit_plane_position(
        E,
        e,
        a,
        long_peri - long_node,
        inclination,
        long_node,
    )
    return position_au * cfg.au_km


def satellite_relative_position(orbit: SatelliteOrbit, when: Instant) -> np.ndarray:
    """Position of a satellite relative to its parent body, in km."""

    days = julian_day(query_millis(when)) - orbit.epoch_jd
    M = math.radians(norm360(orbit.mean_anomaly_deg + orbit.mean_motion_deg_per_day * days))
    E = solve_kepler(M, orbit.eccentricity)
    return _orbit_plane_position(
        E,
        orbit.eccentricity,
        orbit.semi_major_axis_km,
        orbit.arg_periapsis_deg,
        orbit.inclination_deg,
        orbit.ascending_node_deg,
    )


__all__ = [
    "DAYS_PER_CENTURY",
    "KEPLER_MAX_ITERATIONS",
    "KEPLER_TOLERANCE",
    "heliocentric_position",
    "julian_centuries",
    "norm360",
    "query_millis",
    "satellite_relative_position",
    "solve_kepler",
]
