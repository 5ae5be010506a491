"""Surface-to-surface travel geometry between two displayed bodies."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, NamedTuple

import numpy as np

from .config import SCENE_CFG, SceneCfg

_MIN_DIRECTION_LENGTH = 1e-9
_HELPER_PARALLEL_LIMIT = 0.98


class SurfaceEndpoints(NamedTuple):
    start_surface: np.ndarray
    target_surface: np.ndarray


class PosAim(NamedTuple):
    pos: np.ndarray
    aim: np.ndarray


def _vec(value) -> np.ndarray:
    return np.asarray(value, dtype=float)


def _direction(start_center: np.ndarray, target_center: np.ndarray) -> np.ndarray:
    delta = target_center - start_center
    length = max(_MIN_DIRECTION_LENGTH, float(np.linalg.norm(delta)))
    return delta / length


def surface_endpoints(
    start_center,
    start_radius: float,
    target_center,
    target_radius: float,
    cfg: SceneCfg = SCENE_CFG,
) -> SurfaceEndpoints:
    """Points where the centre line leaves the start body and meets the target.

    The target point stops ``landing_clearance`` short of the target surface.
    Coincident centres give a zero direction, so both points collapse onto
    their centres.
    """

    start_center = _vec(start_center)
    target_center = _vec(target_center)
    direction = _direction(start_center, target_center)
    start_surface = start_center + direction * start_radius
    target_surface = target_center - direction * (target_radius + cfg.landing_clearance)
    return SurfaceEndpoints(start_surface, target_surface)


def aim_position(
    start_center,
    target_center,
    target_radius: float,
    cfg: SceneCfg = SCENE_CFG,
) -> np.ndarray:
    """Look-at point for a traveller, independent of where it currently is."""

    start_center = _vec(start_center)
    target_center = _vec(target_center)
    direction = _direction(start_center, target_center)
    return target_center - direction * (target_radius + cfg.landing_clearance)


def travel_position(endpoints: SurfaceEndpoints, fraction: float) -> np.ndarray:
    fraction = min(1.0, max(0.0, fraction))
    start, target = endpoints
    return start + (target - start) * fraction


def tangent_basis(axis) -> tuple[np.ndarray, np.ndarray]:
    """Two unit vectors orthogonal to ``axis`` and to each other."""

    axis = _vec(axis)
    helper = np.array([0.0, 0.0, 1.0])
    if abs(float(np.dot(axis, helper))) > _HELPER_PARALLEL_LIMIT:
        helper = np.array([1.0, 0.0, 0.0])
    right = np.cross(axis, helper)
    right /= max(_MIN_DIRECTION_LENGTH, float(np.linalg.norm(right)))
    up = np.cross(right, axis)
    up /= max(_MIN_DIRECTION_LENGTH, float(np.linalg.norm(up)))
    return right, up


def rotate_about_axis(vector, axis, angle: float) -> np.ndarray:
    """Rodrigues rotation of ``vector`` around the unit ``axis``."""

    vector = _vec(vector)
    axis = _vec(axis)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (
        vector * cos_a
        + np.cross(axis, vector) * sin_a
        + axis * float(np.dot(axis, vector)) * (1.0 - cos_a)
    )


def _lateral(axis: np.ndarray, theta: float) -> np.ndarray:
    right, up = tangent_basis(axis)
    return right * math.cos(theta) + up * math.sin(theta)


def friend_surface_pos_aim(
    start_center,
    target_center,
    start_radius: float,
    target_radius: float,
    theta: float,
    yaw: float,
    cfg: SceneCfg = SCENE_CFG,
) -> PosAim:
    """Resting spot for a fanned-out traveller on the start body's surface.

    The spot is tilted away from the centre line by ``theta`` around the
    travel axis; the aim direction is the centre-line aim rotated by ``yaw``.
    """

    start_center = _vec(start_center)
    target_center = _vec(target_center)
    axis = _direction(start_center, target_center)
    base_surface = start_center + axis * start_radius
    base_aim_dir = aim_position(start_center, target_center, target_radius, cfg) - base_surface

    spread = max(0.0, cfg.landing_spread_fraction)
    tilted = axis + _lateral(axis, theta) * spread
    tilted /= max(_MIN_DIRECTION_LENGTH, float(np.linalg.norm(tilted)))
    pos = start_center + tilted * start_radius
    aim = pos + rotate_about_axis(base_aim_dir, axis, yaw)
    return PosAim(pos, aim)


def friend_travel_pos_aim(
    start_center,
    target_center,
    base_pos,
    start_radius: float,
    theta: float,
    cfg: SceneCfg = SCENE_CFG,
) -> PosAim:
    """In-flight position beside the centre line; everyone aims along the path."""

    start_center = _vec(start_center)
    target_center = _vec(target_center)
    axis = _direction(start_center, target_center)
    offset = _lateral(axis, theta) * (max(0.0, cfg.landing_spread_fraction) * start_radius)
    pos = _vec(base_pos) + offset
    return PosAim(pos, pos + axis)


@dataclass(frozen=True)
class FanOffset:
    key: str
    theta: float
    yaw: float


class FanOutAssigner:
    """Deterministic lateral offsets for travellers sharing a travel key.

    Offsets are cached per uid and only recomputed when that uid's travel
    key changes, so the fan does not reshuffle every frame.
    """

    def __init__(self, cfg: SceneCfg = SCENE_CFG) -> None:
        self._cfg = cfg
        self._cache: dict[str, FanOffset] = {}

    def __contains__(self, uid: object) -> bool:
        return uid in self._cache

    @staticmethod
    def angle_step(count: int) -> float:
        return min(math.pi / 4.0, 2.0 * math.pi / max(3, count + 1))

    def assign(self, keys: Mapping[str, str], user_key: str | None = None) -> dict[str, FanOffset]:
        """Offsets for every uid in ``keys`` (uid -> travel key).

        When ``user_key`` matches a cluster the centre slot is left free for
        the local traveller, so friends fan out around the user instead of
        on top. A lone traveller with no user beside it gets no offset and
        is left out of the result.
        """

        clusters: dict[str, list[str]] = {}
        for uid, key in keys.items():
            clusters.setdefault(key, []).append(uid)

        result: dict[str, FanOffset] = {}
        for key, members in clusters.items():
            members.sort()
            count = len(members)
            with_user = user_key is not None and key == user_key
            if count == 1 and not with_user:
                self._cache.pop(members[0], None)
                continue
            step = self.angle_step(count)
            for idx, uid in enumerate(members):
                cached = self._cache.get(uid)
                if cached is not None and cached.key == key:
                    result[uid] = cached
                    continue
                rel = idx - (count - 1) / 2.0
                if with_user and rel >= 0:
                    rel += 1.0
                offset = FanOffset(
                    key=key,
                    theta=rel * step,
                    yaw=(rel or 1.0) * self._cfg.friend_aim_yaw_step_rad,
                )
                self._cache[uid] = offset
                result[uid] = offset
        return result

    def forget(self, uid: str) -> None:
        self._cache.pop(uid, None)

    def clear(self) -> None:
        self._cache.clear()


__all__ = [
    "FanOffset",
    "FanOutAssigner",
    "PosAim",
    "SurfaceEndpoints",
    "aim_position",
    "friend_surface_pos_aim",
    "friend_travel_pos_aim",
    "rotate_about_axis",
    "surface_endpoints",
    "tangent_basis",
    "travel_position",
]
