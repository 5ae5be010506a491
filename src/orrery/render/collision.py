"""Keeps the orbit camera outside the displayed spheres of nearby bodies."""
from __future__ import annotations

import math
from typing import Callable, Iterable, NamedTuple

import numpy as np

from orrery.core.config import CAMERA_CFG, CameraCfg


class CollisionSphere(NamedTuple):
    center: np.ndarray
    radius: float


CollisionResolver = Callable[[np.ndarray, np.ndarray, float], float]


def safe_orbit_radius(
    center,
    desired_position,
    radius: float,
    spheres: Iterable[CollisionSphere],
    clearance: float = CAMERA_CFG.collision_clearance,
    max_radius: float = CAMERA_CFG.zoom_max_radius,
) -> float:
    """Smallest orbit radius that puts the camera outside every sphere.

    Only spheres that contain ``desired_position`` are solved. For those the
    camera ray ``center + t * dir`` is intersected with the sphere grown by
    ``clearance`` and the far hit is taken. The result never drops below
    ``radius`` unless it has to be clamped to ``max_radius``.
    """

    center = np.asarray(center, dtype=float)
    desired_position = np.asarray(desired_position, dtype=float)
    safe = radius

    offset = desired_position - center
    length = float(np.linalg.norm(offset))
    if length <= 1e-9:
        return safe
    direction = offset / length

    for sphere_center, sphere_radius in spheres:
        sphere_center = np.asarray(sphere_center, dtype=float)
        grown = sphere_radius + clearance
        if float(np.linalg.norm(desired_position - sphere_center)) >= grown:
            continue
        rel = center - sphere_center
        b = float(np.dot(rel, direction))
        c = float(np.dot(rel, rel)) - grown * grown
        disc = b * b - c
        if disc < 0.0:
            continue
        far = -b + math.sqrt(disc)
        if far > safe:
            safe = far

    return min(safe, max_radius)


def make_collision_resolver(
    sphere_source: Callable[[], Iterable[CollisionSphere]],
    cfg: CameraCfg = CAMERA_CFG,
) -> CollisionResolver:
    """Bind :func:`safe_orbit_radius` to a live source of collision spheres."""

    def resolve(center: np.ndarray, desired_position: np.ndarray, radius: float) -> float:
        return safe_orbit_radius(
            center,
            desired_position,
            radius,
            sphere_source(),
            clearance=cfg.collision_clearance,
            max_radius=cfg.zoom_max_radius,
        )

    return resolve


__all__ = [
    "CollisionResolver",
    "CollisionSphere",
    "make_collision_resolver",
    "safe_orbit_radius",
]
