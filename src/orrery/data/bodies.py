"""Static body catalogue: the Sun, planets and major moons.

Planet elements are the JPL approximate Keplerian elements (valid
1800 AD - 2050 AD) with rates per Julian century. Moon elements are mean
elements relative to the parent at J2000.
"""
from __future__ import annotations

from orrery.core.bodies import (
    BodyRegistry,
    CelestialBody,
    KeplerianElements,
    Moon,
    Planet,
    SatelliteOrbit,
    Star,
)
from orrery.core.projection import EARTH_RADIUS_KM
from orrery.core.timekeeping import Clock


SUN = Star(name="Sun", radius_km=695_700.0, color=0xFDB813)

MERCURY = Planet(
    name="Mercury",
    radius_km=2_439.7,
    color=0xB5B5B5,
    min_level=2,
    axial_tilt_deg=0.03,
    elements=KeplerianElements(
        a=0.38709927, e=0.20563593, i=7.00497902,
        L=252.25032350, long_peri=77.45779628, long_node=48.33076593,
        a_dot=0.00000037, e_dot=0.00001906, i_dot=-0.00594749,
        L_dot=149472.67411175, long_peri_dot=0.16047689, long_node_dot=-0.12534081,
    ),
)
VENUS = Planet(
    name="Venus",
    radius_km=6_051.8,
    color=0xE8CDA0,
    min_level=3,
    axial_tilt_deg=177.4,
    elements=KeplerianElements(
        a=0.72333566, e=0.00677672, i=3.39467605,
        L=181.97909950, long_peri=131.60246718, long_node=76.67984255,
        a_dot=0.00000390, e_dot=-0.00004107, i_dot=-0.00078890,
        L_dot=58517.81538729, long_peri_dot=0.00268329, long_node_dot=-0.27769418,
    ),
)
# Earth-Moon barycentre elements; close enough to Earth's centre for display.
EARTH = Planet(
    name="Earth",
    radius_km=EARTH_RADIUS_KM,
    color=0x6B93D6,
    min_level=1,
    axial_tilt_deg=23.44,
    always_render_if_discovered=True,
    elements=KeplerianElements(
        a=1.00000261, e=0.01671123, i=-0.00001531,
        L=100.46457166, long_peri=102.93768193, long_node=0.0,
        a_dot=0.00000562, e_dot=-0.00004392, i_dot=-0.01294668,
        L_dot=35999.37244981, long_peri_dot=0.32327364, long_node_dot=0.0,
    ),
)
MARS = Planet(
    name="Mars",
    radius_km=3_389.5,
    color=0xC1440E,
    min_level=4,
    axial_tilt_deg=25.19,
    elements=KeplerianElements(
        a=1.52371034, e=0.09339410, i=1.84969142,
        L=-4.55343205, long_peri=-23.94362959, long_node=49.55953891,
        a_dot=0.00001847, e_dot=0.00007882, i_dot=-0.00813131,
        L_dot=19140.30268499, long_peri_dot=0.44441088, long_node_dot=-0.29257343,
    ),
)
JUPITER = Planet(
    name="Jupiter",
    radius_km=69_911.0,
    color=0xC88B3A,
    min_level=6,
    axial_tilt_deg=3.13,
    elements=KeplerianElements(
        a=5.20288700, e=0.04838624, i=1.30439695,
        L=34.39644051, long_peri=14.72847983, long_node=100.47390909,
        a_dot=-0.00011607, e_dot=-0.00013253, i_dot=-0.00183714,
        L_dot=3034.74612775, long_peri_dot=0.21252668, long_node_dot=0.20469106,
    ),
)
SATURN = Planet(
    name="Saturn",
    radius_km=58_232.0,
    color=0xE8D191,
    min_level=8,
    axial_tilt_deg=26.73,
    elements=KeplerianElements(
        a=9.53667594, e=0.05386179, i=2.48599187,
        L=49.95424423, long_peri=92.59887831, long_node=113.66242448,
        a_dot=-0.00125060, e_dot=-0.00050991, i_dot=0.00193609,
        L_dot=1222.49362201, long_peri_dot=-0.41897216, long_node_dot=-0.28867794,
    ),
)
URANUS = Planet(
    name="Uranus",
    radius_km=25_362.0,
    color=0xD1E7E7,
    min_level=10,
    axial_tilt_deg=97.77,
    elements=KeplerianElements(
        a=19.18916464, e=0.04725744, i=0.77263783,
        L=313.23810451, long_peri=170.95427630, long_node=74.01692503,
        a_dot=-0.00196176, e_dot=-0.00004397, i_dot=-0.00242939,
        L_dot=428.48202785, long_peri_dot=0.40805281, long_node_dot=0.04240589,
    ),
)
NEPTUNE = Planet(
    name="Neptune",
    radius_km=24_622.0,
    color=0x5B5DDF,
    min_level=12,
    axial_tilt_deg=28.32,
    elements=KeplerianElements(
        a=30.06992276, e=0.00859048, i=1.77004347,
        L=-55.12002969, long_peri=44.96476227, long_node=131.78422574,
        a_dot=0.00026291, e_dot=0.00005105, i_dot=0.00035372,
        L_dot=218.45945325, long_peri_dot=-0.32241464, long_node_dot=-0.00508664,
    ),
)
PLUTO = Planet(
    name="Pluto",
    radius_km=1_188.3,
    color=0xC2B280,
    min_level=14,
    axial_tilt_deg=122.53,
    elements=KeplerianElements(
        a=39.48211675, e=0.24882730, i=17.14001206,
        L=238.92903833, long_peri=224.06891629, long_node=110.30393684,
        a_dot=-0.00031596, e_dot=0.00005170, i_dot=0.00004818,
        L_dot=145.20780515, long_peri_dot=-0.04062942, long_node_dot=-0.01183482,
    ),
)

THE_MOON = Moon(
    name="The Moon",
    radius_km=1_737.4,
    color=0xCCCCCC,
    orbits="Earth",
    orbit=SatelliteOrbit(
        semi_major_axis_km=384_400.0, eccentricity=0.0549, inclination_deg=5.145,
        ascending_node_deg=125.08, arg_periapsis_deg=318.15,
        mean_anomaly_deg=135.27, mean_motion_deg_per_day=13.176358,
    ),
)
PHOBOS = Moon(
    name="Phobos",
    radius_km=11.1,
    color=0x917E6E,
    orbits="Mars",
    orbit_offset_multiplier=60.0,
    orbit=SatelliteOrbit(
        semi_major_axis_km=9_376.0, eccentricity=0.0151, inclination_deg=1.075,
        ascending_node_deg=16.946, arg_periapsis_deg=150.057,
        mean_anomaly_deg=91.059, mean_motion_deg_per_day=1128.8445,
    ),
)
DEIMOS = Moon(
    name="Deimos",
    radius_km=6.2,
    color=0xB5A78C,
    orbits="Mars",
    orbit_offset_multiplier=40.0,
    orbit=SatelliteOrbit(
        semi_major_axis_km=23_463.2, eccentricity=0.00033, inclination_deg=1.788,
        ascending_node_deg=47.0, arg_periapsis_deg=260.729,
        mean_anomaly_deg=325.329, mean_motion_deg_per_day=285.1618,
    ),
)
IO = Moon(
    name="Io",
    radius_km=1_821.6,
    color=0xFFFF66,
    orbits="Jupiter",
    orbit=SatelliteOrbit(
        semi_major_axis_km=421_700.0, eccentricity=0.0041, inclination_deg=0.036,
        ascending_node_deg=43.977, arg_periapsis_deg=84.129,
        mean_anomaly_deg=342.021, mean_motion_deg_per_day=203.4889538,
    ),
)
EUROPA = Moon(
    name="Europa",
    radius_km=1_560.8,
    color=0xB0A890,
    orbits="Jupiter",
    orbit=SatelliteOrbit(
        semi_major_axis_km=671_034.0, eccentricity=0.009, inclination_deg=0.466,
        ascending_node_deg=219.106, arg_periapsis_deg=88.970,
        mean_anomaly_deg=171.016, mean_motion_deg_per_day=101.3747235,
    ),
)
GANYMEDE = Moon(
    name="Ganymede",
    radius_km=2_631.2,
    color=0x8C7E6C,
    orbits="Jupiter",
    orbit=SatelliteOrbit(
        semi_major_axis_km=1_070_412.0, eccentricity=0.0013, inclination_deg=0.177,
        ascending_node_deg=63.552, arg_periapsis_deg=192.417,
        mean_anomaly_deg=317.540, mean_motion_deg_per_day=50.3176081,
    ),
)
CALLISTO = Moon(
    name="Callisto",
    radius_km=2_410.3,
    color=0x707060,
    orbits="Jupiter",
    orbit=SatelliteOrbit(
        semi_major_axis_km=1_882_709.0, eccentricity=0.0074, inclination_deg=0.192,
        ascending_node_deg=298.848, arg_periapsis_deg=52.643,
        mean_anomaly_deg=181.408, mean_motion_deg_per_day=21.5710715,
    ),
)
TITAN = Moon(
    name="Titan",
    radius_km=2_574.7,
    color=0xD4A017,
    orbits="Saturn",
    orbit=SatelliteOrbit(
        semi_major_axis_km=1_221_870.0, eccentricity=0.0288, inclination_deg=0.34854,
        ascending_node_deg=28.06, arg_periapsis_deg=180.532,
        mean_anomaly_deg=163.310, mean_motion_deg_per_day=22.5769768,
    ),
)
TRITON = Moon(
    name="Triton",
    radius_km=1_353.4,
    color=0xB0C4DE,
    orbits="Neptune",
    orbit=SatelliteOrbit(
        semi_major_axis_km=354_759.0, eccentricity=0.000016, inclination_deg=23.0,
        ascending_node_deg=177.608, arg_periapsis_deg=66.142,
        mean_anomaly_deg=352.257, mean_motion_deg_per_day=-61.2572637,
    ),
)
CHARON = Moon(
    name="Charon",
    radius_km=606.0,
    color=0x9B9B9B,
    orbits="Pluto",
    orbit=SatelliteOrbit(
        semi_major_axis_km=19_591.0, eccentricity=0.0002, inclination_deg=0.08,
        ascending_node_deg=223.046, arg_periapsis_deg=0.0,
        mean_anomaly_deg=0.0, mean_motion_deg_per_day=56.3625,
    ),
)

BODY_DEFINITIONS: tuple[CelestialBody, ...] = (
    SUN,
    MERCURY, VENUS, EARTH, MARS, JUPITER, SATURN, URANUS, NEPTUNE, PLUTO,
    THE_MOON, PHOBOS, DEIMOS,
    IO, EUROPA, GANYMEDE, CALLISTO,
    TITAN, TRITON, CHARON,
)

BODIES: dict[str, CelestialBody] = {body.name: body for body in BODY_DEFINITIONS}
DEFAULT_STARTING_LOCATION = EARTH.name


def build_registry(clock: Clock | None = None) -> BodyRegistry:
    """Registry over the full catalogue, validated before it is returned."""

    registry = BodyRegistry(BODY_DEFINITIONS, clock=clock)
    registry.validate()
    return registry


__all__ = [
    "BODIES",
    "BODY_DEFINITIONS",
    "DEFAULT_STARTING_LOCATION",
    "EARTH",
    "EARTH_RADIUS_KM",
    "SUN",
    "THE_MOON",
    "build_registry",
]
