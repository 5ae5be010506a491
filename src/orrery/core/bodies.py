"""Celestial body model and the name-keyed body registry."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from .config import SCENE_CFG
from .kepler import heliocentric_position, satellite_relative_position
from .timekeeping import Clock, Instant


class UnknownBodyError(LookupError):
    """Raised when a body name is not present in the registry."""


class BodyConfigurationError(ValueError):
    """Raised when the static body table is inconsistent."""


@dataclass(frozen=True)
class KeplerianElements:
    """Heliocentric elements at J2000 with optional per-century rates.

    Angles are in degrees, ``a`` in AU.
    """

    a: float
    e: float
    i: float
    L: float
    long_peri: float
    long_node: float
    a_dot: float = 0.0
    e_dot: float = 0.0
    i_dot: float = 0.0
    L_dot: float = 0.0
    long_peri_dot: float = 0.0
    long_node_dot: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.e < 1.0:
            raise ValueError(f"eccentricity must be in [0, 1), got {self.e}")


@dataclass(frozen=True)
class SatelliteOrbit:
    """Elements of a moon relative to its parent (km, degrees, degrees/day).

    A negative mean motion describes a retrograde orbit.
    """

    semi_major_axis_km: float
    eccentricity: float
    inclination_deg: float
    ascending_node_deg: float
    arg_periapsis_deg: float
    mean_anomaly_deg: float
    mean_motion_deg_per_day: float
    epoch_jd: float = SCENE_CFG.j2000_jd

    def __post_init__(self) -> None:
        if not 0.0 <= self.eccentricity < 1.0:
            raise ValueError(f"eccentricity must be in [0, 1), got {self.eccentricity}")


@dataclass(frozen=True)
class Star:
    name: str
    radius_km: float
    color: int
    position_km: tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Planet:
    name: str
    radius_km: float
    color: int
    elements: KeplerianElements
    min_level: int = 0
    axial_tilt_deg: float = 0.0
    always_render_if_discovered: bool = False

    @property
    def orbital_period_days(self) -> float:
        return 365.25 * self.elements.a ** 1.5


@dataclass(frozen=True)
class Moon:
    name: str
    radius_km: float
    color: int
    orbit: SatelliteOrbit
    orbits: str
    orbit_offset_multiplier: float | None = None

    @property
    def orbital_period_days(self) -> float:
        return 360.0 / abs(self.orbit.mean_motion_deg_per_day)


CelestialBody = Star | Planet | Moon


def body_position(body: CelestialBody, when: Instant, registry: BodyRegistry) -> np.ndarray:
    """Heliocentric position of ``body`` in km."""

    match body:
        case Star(position_km=fixed):
            return np.array(fixed, dtype=float)
        case Planet(elements=elements):
            return heliocentric_position(elements, when)
        case Moon(orbit=orbit, orbits=parent_name):
            parent = registry.get(parent_name)
            return body_position(parent, when, registry) + satellite_relative_position(orbit, when)
    raise TypeError(f"unsupported body type: {type(body).__name__}")


class BodyRegistry:
    """Flat arena of bodies keyed by name.

    Moons refer to their parent by name; lookups happen at query time.
    """

    def __init__(self, bodies: Iterable[CelestialBody], *, clock: Clock | None = None) -> None:
        self._bodies: dict[str, CelestialBody] = {}
        for body in bodies:
            if body.name in self._bodies:
                raise BodyConfigurationError(f"duplicate body name: {body.name}")
            self._bodies[body.name] = body
        self.clock = clock or Clock()

    def __contains__(self, name: object) -> bool:
        return name in self._bodies

    def __iter__(self) -> Iterator[CelestialBody]:
        return iter(self._bodies.values())

    def __len__(self) -> int:
        return len(self._bodies)

    @property
    def names(self) -> list[str]:
        return list(self._bodies)

    def get(self, name: str) -> CelestialBody:
        try:
            return self._bodies[name]
        except KeyError:
            raise UnknownBodyError(f"unknown body: {name!r}") from None

    def find(self, name: str | None) -> CelestialBody | None:
        if name is None:
            return None
        return self._bodies.get(name)

    def parent_of(self, name: str) -> CelestialBody | None:
        body = self.get(name)
        if isinstance(body, Moon):
            return self.get(body.orbits)
        return None

    def position(self, name: str, when: Instant | None = None) -> np.ndarray:
        if when is None:
            when = self.clock.now_ms()
        return body_position(self.get(name), when, self)

    def validate(self) -> None:
        """Check that every moon resolves, through its parents, to a star."""

        for body in self._bodies.values():
            seen = {body.name}
            current = body
            while isinstance(current, Moon):
                parent = self._bodies.get(current.orbits)
                if parent is None:
                    raise BodyConfigurationError(
                        f"{body.name}: parent {current.orbits!r} is not registered"
                    )
                if parent.name in seen:
                    raise BodyConfigurationError(f"{body.name}: parent chain forms a cycle")
                seen.add(parent.name)
                current = parent
            if isinstance(current, Planet) and not any(
                isinstance(b, Star) for b in self._bodies.values()
            ):
                raise BodyConfigurationError(f"{body.name}: no star to orbit")


def relevant_systems(
    registry: BodyRegistry,
    starting: str | None,
    target: str | None = None,
) -> set[str]:
    """Planet systems whose moons should be shown for a start/target pair."""

    systems: set[str] = set()
    for name in (starting, target):
        body = registry.find(name)
        if isinstance(body, Moon):
            systems.add(body.orbits)
        elif isinstance(body, Planet):
            systems.add(body.name)
    return systems


def distance_km(registry: BodyRegistry, a: str, b: str, when: Instant | None = None) -> float:
    if when is None:
        when = registry.clock.now_ms()
    return float(np.linalg.norm(registry.position(a, when) - registry.position(b, when)))


__all__ = [
    "BodyConfigurationError",
    "BodyRegistry",
    "CelestialBody",
    "KeplerianElements",
    "Moon",
    "Planet",
    "SatelliteOrbit",
    "Star",
    "UnknownBodyError",
    "body_position",
    "distance_km",
    "relevant_systems",
]
