from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from orrery.core.config import CAMERA_CFG, TIMING_CFG, CameraCfg, TimingCfg
from orrery.core.timekeeping import Clock

from .collision import CollisionResolver
from .sequencer import (
    YAW_SIDE,
    CameraPhase,
    CameraState,
    ScriptedSequence,
    Vantage,
    vantage_for_progress,
)

_Y_AXIS = np.array([0.0, 1.0, 0.0])
_X_AXIS = np.array([1.0, 0.0, 0.0])


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def _helper_axis(vector: np.ndarray, threshold: float) -> np.ndarray:
    length = float(np.linalg.norm(vector))
    y = abs(vector[1]) / length if length > 0.0 else 0.0
    return _Y_AXIS if y < threshold else _X_AXIS


@dataclass(frozen=True)
class CameraPose:
    position: np.ndarray
    up: np.ndarray
    look_at: np.ndarray
    radius: float


def orbit_basis(
    center,
    target,
    cfg: CameraCfg = CAMERA_CFG,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Orthonormal ``(n, u, v)`` for the plane through the sun, centre and target.

    ``n`` always points away from the ecliptic up vector so the camera stays
    on the same side of the plane from one frame to the next. ``u`` points
    from the centre towards the target within the plane.
    """

    center = np.asarray(center, dtype=float)
    target = np.asarray(target, dtype=float)
    eps = cfg.plane_normal_eps
    up = cfg.ecliptic_up

    n = np.cross(center, target)
    if float(np.dot(n, n)) < eps:
        n = np.cross(center, _helper_axis(center, cfg.helper_axis_threshold))
        if float(np.dot(n, n)) < eps:
            n = _Y_AXIS.copy()
    n = n / np.linalg.norm(n)
    if float(np.dot(n, up)) > 0.0:
        n = -n

    toward = target - center
    u = toward - n * float(np.dot(toward, n))
    if float(np.dot(u, u)) < eps:
        u = np.cross(up, n)
        if float(np.dot(u, u)) < eps:
            u = np.cross(_helper_axis(n, cfg.helper_axis_threshold), n)
    u = u / np.linalg.norm(u)
    v = np.cross(n, u)
    v = v / np.linalg.norm(v)
    return n, u, v


def orbit_pose(
    center,
    target,
    yaw: float,
    pitch: float,
    radius: float,
    cfg: CameraCfg = CAMERA_CFG,
) -> CameraPose:
    center = np.asarray(center, dtype=float)
    n, u, v = orbit_basis(center, target, cfg)
    pitch = _clamp(pitch, -cfg.max_pitch_rad, cfg.max_pitch_rad)
    flat = radius * np.cos(pitch)
    position = (
        center
        + n * (radius * np.sin(pitch))
        + (u * np.cos(yaw) + v * np.sin(yaw)) * flat
    )
    return CameraPose(position=position, up=n, look_at=center.copy(), radius=radius)


class CameraController:
    """Orbit camera around the traveller with gestures and a scripted mode.

    One controller is created per scene and handed to whatever forwards
    input to it; nothing looks it up globally.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        *,
        cfg: CameraCfg = CAMERA_CFG,
        timing: TimingCfg = TIMING_CFG,
    ) -> None:
        self._cfg = cfg
        self._timing = timing
        self._clock = clock or Clock()
        self._state = CameraState(yaw=cfg.initial_yaw, pitch=0.0, radius=cfg.initial_radius)
        self._yaw_target = self._state.yaw
        self._pitch_target = self._state.pitch
        self._radius_target = self._state.radius
        self._yaw_velocity = 0.0
        self._pitch_velocity = 0.0
        self._panning = False
        self._pinch_start_radius = self._radius_target
        self._sequence: ScriptedSequence | None = None
        self._phase = CameraPhase.IDLE
        self._resolver: CollisionResolver | None = None

    @property
    def cfg(self) -> CameraCfg:
        return self._cfg

    @property
    def state(self) -> CameraState:
        return self._state

    @property
    def targets(self) -> CameraState:
        return CameraState(self._yaw_target, self._pitch_target, self._radius_target)

    @property
    def phase(self) -> CameraPhase:
        return self._phase

    @property
    def scripted_active(self) -> bool:
        return self._sequence is not None

    @property
    def sequence(self) -> ScriptedSequence | None:
        return self._sequence

    @property
    def panning(self) -> bool:
        return self._panning

    @property
    def velocity(self) -> tuple[float, float]:
        return self._yaw_velocity, self._pitch_velocity

    def set_orbit(
        self,
        yaw: float | None = None,
        pitch: float | None = None,
        radius: float | None = None,
    ) -> None:
        """Jump the camera; targets follow so nothing tweens back."""

        state = self._state
        if yaw is not None:
            self._yaw_target = yaw
        else:
            yaw = state.yaw
        if pitch is not None:
            pitch = _clamp(pitch, -self._cfg.max_pitch_rad, self._cfg.max_pitch_rad)
            self._pitch_target = pitch
        else:
            pitch = state.pitch
        if radius is not None:
            self._radius_target = radius
        else:
            radius = state.radius
        self._state = CameraState(yaw, pitch, radius)

    def set_targets(
        self,
        yaw: float | None = None,
        pitch: float | None = None,
        radius: float | None = None,
    ) -> None:
        cfg = self._cfg
        if yaw is not None:
            self._yaw_target = yaw
        if pitch is not None:
            self._pitch_target = _clamp(pitch, -cfg.max_pitch_rad, cfg.max_pitch_rad)
        if radius is not None:
            self._radius_target = _clamp(radius, cfg.zoom_min_radius, cfg.zoom_max_radius)

    def _stop_inertia(self) -> None:
        self._yaw_velocity = 0.0
        self._pitch_velocity = 0.0

    def reset_zoom(self) -> None:
        self._radius_target = self._cfg.initial_radius
        self._stop_inertia()

    def cycle_double_tap(self) -> float:
        """Step the zoom target to the next preset level, wrapping to the first."""

        levels = sorted(self._cfg.double_tap_radii)
        if not levels:
            self.reset_zoom()
            return self._radius_target
        current = self._radius_target
        chosen = next((level for level in levels if level > current + 1e-9), levels[0])
        self._radius_target = _clamp(chosen, self._cfg.zoom_min_radius, self._cfg.zoom_max_radius)
        self._stop_inertia()
        return self._radius_target

    # Gestures -----------------------------------------------------------

    def _cancel_for_gesture(self) -> None:
        if self._sequence is not None:
            self._sequence = None
            self._phase = CameraPhase.IDLE

    def begin_pan(self) -> None:
        self._panning = True
        self._cancel_for_gesture()

    def _rad_per_px(self, viewport_width: float, viewport_height: float) -> tuple[float, float]:
        cfg = self._cfg
        return (
            cfg.pan_yaw_per_full_drag / max(1.0, viewport_width),
            cfg.pan_pitch_per_full_drag / max(1.0, viewport_height),
        )

    def update_pan(self, dx: float, dy: float, viewport_width: float, viewport_height: float) -> None:
        per_x, per_y = self._rad_per_px(viewport_width, viewport_height)
        max_pitch = self._cfg.max_pitch_rad
        self._yaw_target -= dx * per_x
        self._pitch_target = _clamp(self._pitch_target + dy * per_y, -max_pitch, max_pitch)

    def end_pan(
        self,
        velocity_x: float,
        velocity_y: float,
        viewport_width: float,
        viewport_height: float,
    ) -> None:
        """Release a pan with a fling velocity in pixels per second."""

        cfg = self._cfg
        self._panning = False
        per_x, per_y = self._rad_per_px(viewport_width, viewport_height)
        yaw_step = -(velocity_x / cfg.inertia_frames_per_second) * per_x
        pitch_step = (velocity_y / cfg.inertia_frames_per_second) * per_y
        self._yaw_velocity = _clamp(yaw_step, -cfg.yaw_velocity_clamp, cfg.yaw_velocity_clamp)
        self._pitch_velocity = _clamp(
            pitch_step, -cfg.pitch_velocity_clamp, cfg.pitch_velocity_clamp
        )

    def begin_pinch(self) -> None:
        self._pinch_start_radius = self._radius_target
        self._cancel_for_gesture()

    def update_pinch(self, scale: float) -> None:
        cfg = self._cfg
        self._radius_target = _clamp(
            self._pinch_start_radius / max(1e-6, scale),
            cfg.zoom_min_radius,
            cfg.zoom_max_radius,
        )

    # Scripted sequence --------------------------------------------------

    def start_scripted_camera(
        self,
        now_ms: float,
        camera_start: CameraState,
        vantage_start: Vantage,
        vantage_end: Vantage | None = None,
    ) -> ScriptedSequence:
        self._sequence = ScriptedSequence(
            start_ms=now_ms,
            camera_start=camera_start,
            vantage_start=vantage_start,
            vantage_end=vantage_end or vantage_start,
            timing=self._timing,
            camera_cfg=self._cfg,
        )
        self._phase = CameraPhase.PRE_ROLL_MOVE
        self._stop_inertia()
        self._radius_target = self._cfg.initial_radius
        return self._sequence

    def start_scripted_camera_from_progress(
        self,
        now_ms: float,
        camera_start: CameraState,
        from_abs: float,
        to_abs: float,
        lock_side_on_yaw: bool = False,
    ) -> ScriptedSequence:
        """Start a sequence whose vantages follow the journey fractions.

        With ``lock_side_on_yaw`` both vantages look side-on, which keeps
        short hops (e.g. planet to own moon) from ending behind the parent.
        """

        start = vantage_for_progress(from_abs, self._cfg)
        end = vantage_for_progress(to_abs, self._cfg)
        if lock_side_on_yaw:
            start = Vantage(yaw=YAW_SIDE, pitch=start.pitch)
            end = Vantage(yaw=YAW_SIDE, pitch=end.pitch)
        return self.start_scripted_camera(now_ms, camera_start, start, end)

    def stop_scripted_camera(self) -> None:
        self._sequence = None
        self._phase = CameraPhase.IDLE

    def set_collision_resolver(self, resolver: CollisionResolver | None) -> None:
        self._resolver = resolver

    # Per-frame update ---------------------------------------------------

    def _apply_sequence(self, now_ms: float) -> None:
        sequence = self._sequence
        if sequence is None:
            return
        if sequence.finished(now_ms):
            self._sequence = None
            self._phase = CameraPhase.COMPLETE
            return
        result = sequence.targets(now_ms)
        self._phase = result.phase
        self._yaw_target = result.yaw
        self._radius_target = result.radius

    def _apply_inertia(self, auto_rotate: bool) -> None:
        cfg = self._cfg
        eps = cfg.inertia_stop_epsilon
        if auto_rotate and not self._panning and abs(self._yaw_velocity) < eps:
            self._yaw_target += cfg.auto_rotate_yaw_speed

        if abs(self._yaw_velocity) > eps:
            self._yaw_target += self._yaw_velocity
            self._yaw_velocity *= cfg.inertia_friction
            if abs(self._yaw_velocity) < eps:
                self._yaw_velocity = 0.0

        if abs(self._pitch_velocity) > eps:
            self._pitch_target = _clamp(
                self._pitch_target + self._pitch_velocity,
                -cfg.max_pitch_rad,
                cfg.max_pitch_rad,
            )
            self._pitch_velocity *= cfg.inertia_friction
            if abs(self._pitch_velocity) < eps:
                self._pitch_velocity = 0.0

    def tick(
        self,
        center,
        target,
        *,
        now_ms: float | None = None,
        auto_rotate: bool = True,
    ) -> CameraPose:
        if now_ms is None:
            now_ms = self._clock.now_ms()
        cfg = self._cfg

        self._apply_sequence(now_ms)
        self._apply_inertia(auto_rotate)

        state = self._state
        self._state = CameraState(
            yaw=state.yaw + (self._yaw_target - state.yaw) * cfg.smoothing_yaw,
            pitch=state.pitch + (self._pitch_target - state.pitch) * cfg.smoothing_pitch,
            radius=state.radius + (self._radius_target - state.radius) * cfg.smoothing_radius,
        )

        state = self._state
        pose = orbit_pose(center, target, state.yaw, state.pitch, state.radius, cfg)
        if self._resolver is not None:
            safe = self._resolver(pose.look_at, pose.position, state.radius)
            if safe > state.radius:
                pose = orbit_pose(center, target, state.yaw, state.pitch, safe, cfg)
        return pose


__all__ = [
    "CameraController",
    "CameraPhase",
    "CameraPose",
    "CameraState",
    "Vantage",
    "orbit_basis",
    "orbit_pose",
]
