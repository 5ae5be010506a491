"""Conversions from physical kilometres to bounded scene units."""
from __future__ import annotations

import numpy as np

from .bodies import BodyRegistry, Moon, Planet
from .config import SCENE_CFG, SceneCfg
from .kepler import query_millis
from .timekeeping import MS_PER_DAY, Instant

EARTH_RADIUS_KM = 6_371.0


def to_scene_units(km: np.ndarray | tuple[float, float, float], cfg: SceneCfg = SCENE_CFG) -> np.ndarray:
    return np.asarray(km, dtype=float) * cfg.km_to_scene


def apparent_scale_ratio(ratio: float, cfg: SceneCfg = SCENE_CFG) -> float:
    """Power-law compression of a size ratio relative to Earth.

    Keeps giants from dwarfing Earth and keeps small moons visible. The ratio
    is floored before exponentiation so tiny inputs never collapse to zero.
    """

    return max(ratio, cfg.min_scale_ratio) ** cfg.size_exponent


def apparent_radius(
    true_radius_km: float,
    reference_radius_km: float = EARTH_RADIUS_KM,
    cfg: SceneCfg = SCENE_CFG,
) -> float:
    """Display radius in scene units for a body of ``true_radius_km``."""

    if reference_radius_km <= 0.0:
        raise ValueError("reference radius must be positive")
    radius_km = max(cfg.min_body_radius_km, true_radius_km)
    return cfg.body_radius_multiplier * apparent_scale_ratio(radius_km / reference_radius_km, cfg)


def _offset_multiplier(body: Moon, cfg: SceneCfg) -> float:
    if body.orbit_offset_multiplier is None:
        return cfg.orbit_offset_multiplier
    return body.orbit_offset_multiplier


def display_position(
    registry: BodyRegistry,
    name: str,
    when: Instant | None = None,
    cfg: SceneCfg = SCENE_CFG,
) -> np.ndarray:
    """Scene position of a body as it is drawn.

    Moons are pushed outward from their parent along the parent->moon
    direction so they clear the parent's exaggerated display radius.
    """

    if when is None:
        when = registry.clock.now_ms()
    body = registry.get(name)
    base = to_scene_units(registry.position(name, when), cfg)
    if isinstance(body, Moon):
        parent = to_scene_units(registry.position(body.orbits, when), cfg)
        return parent + (base - parent) * _offset_multiplier(body, cfg)
    return base


def orbit_trail(
    registry: BodyRegistry,
    name: str,
    when: Instant | None = None,
    segments: int | None = None,
    cfg: SceneCfg = SCENE_CFG,
) -> np.ndarray:
    """Recent path of a body as an ``(segments + 1, 3)`` array of scene points.

    Moon trails are drawn around the parent's current position using the
    historical parent-relative offsets, so the ring stays attached to the
    parent instead of smearing along the parent's heliocentric motion.
    """

    body = registry.get(name)
    if not isinstance(body, (Planet, Moon)):
        return np.empty((0, 3), dtype=float)
    if segments is None:
        segments = cfg.trail_segments
    segments = max(1, segments)
    if when is None:
        when = registry.clock.now_ms()
    now_ms = query_millis(when)

    period_days = cfg.trail_length_multiplier * body.orbital_period_days
    step_ms = period_days * MS_PER_DAY / segments
    stamps = [now_ms - i * step_ms for i in range(segments, -1, -1)]

    if isinstance(body, Moon):
        multiplier = _offset_multiplier(body, cfg)
        anchor = to_scene_units(registry.position(body.orbits, now_ms), cfg)
        offsets = [
            registry.position(name, stamp) - registry.position(body.orbits, stamp)
            for stamp in stamps
        ]
        return anchor + to_scene_units(np.array(offsets), cfg) * multiplier

    return to_scene_units(np.array([registry.position(name, stamp) for stamp in stamps]), cfg)


__all__ = [
    "EARTH_RADIUS_KM",
    "apparent_radius",
    "apparent_scale_ratio",
    "display_position",
    "orbit_trail",
    "to_scene_units",
]
