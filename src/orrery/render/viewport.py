from __future__ import annotations

import math

import numpy as np

from orrery.core.config import RENDER_CFG, RenderCfg

from .camera import CameraPose


class Viewport:
    """Pinhole projection of scene points onto the window for a camera pose."""

    def __init__(self, size: tuple[int, int], *, render_cfg: RenderCfg = RENDER_CFG) -> None:
        self._size = size
        self._cfg = render_cfg
        self._position = np.zeros(3)
        self._forward = np.array([1.0, 0.0, 0.0])
        self._right = np.array([0.0, 1.0, 0.0])
        self._up = np.array([0.0, 0.0, 1.0])

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def update_size(self, size: tuple[int, int]) -> None:
        self._size = size

    @property
    def focal_length(self) -> float:
        half_fov = math.radians(self._cfg.fov_deg) / 2.0
        return (self._size[1] / 2.0) / math.tan(half_fov)

    @property
    def position(self) -> np.ndarray:
        return self._position

    def set_pose(self, pose: CameraPose) -> None:
        forward = pose.look_at - pose.position
        length = float(np.linalg.norm(forward))
        if length <= 1e-12:
            return
        forward = forward / length
        right = np.cross(forward, pose.up)
        if float(np.linalg.norm(right)) <= 1e-12:
            # looking straight along the up vector
            right = np.cross(forward, np.array([1.0, 0.0, 0.0]))
            if float(np.linalg.norm(right)) <= 1e-12:
                right = np.cross(forward, np.array([0.0, 1.0, 0.0]))
        right = right / np.linalg.norm(right)
        self._position = np.asarray(pose.position, dtype=float)
        self._forward = forward
        self._right = right
        self._up = np.cross(right, forward)

    def depth(self, point) -> float:
        return float(np.dot(np.asarray(point, dtype=float) - self._position, self._forward))

    def world_to_screen(self, point) -> tuple[int, int] | None:
        """Pixel coordinates of ``point``, or ``None`` if it is behind the near plane."""

        offset = np.asarray(point, dtype=float) - self._position
        z = float(np.dot(offset, self._forward))
        if z <= self._cfg.near or z >= self._cfg.far:
            return None
        focal = self.focal_length
        width, height = self._size
        sx = width / 2.0 + float(np.dot(offset, self._right)) * focal / z
        sy = height / 2.0 - float(np.dot(offset, self._up)) * focal / z
        return int(round(sx)), int(round(sy))

    def projected_radius(self, point, radius: float) -> float:
        z = self.depth(point)
        if z <= self._cfg.near:
            return 0.0
        return radius * self.focal_length / z

    def project_polyline(self, points: np.ndarray) -> list[tuple[int, int]]:
        """Screen points for a polyline, dropping vertices that fall off the frustum."""

        projected: list[tuple[int, int]] = []
        for point in points:
            screen = self.world_to_screen(point)
            if screen is not None:
                projected.append(screen)
        return projected


__all__ = ["Viewport"]
