"""Scripted camera sequence: pre-roll move, hold, then follow the rocket.

All phases are computed from absolute timestamps so a paused render loop
resumes at the right point instead of replaying the frames it missed.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from orrery.core.config import CAMERA_CFG, TIMING_CFG, CameraCfg, TimingCfg

PITCH_LOW = 0.06
YAW_AHEAD = 0.0
YAW_SIDE = math.pi / 2.0
YAW_BEHIND = math.pi


class CameraPhase(str, Enum):
    IDLE = "Idle"
    PRE_ROLL_MOVE = "PreRollMove"
    HOLD = "Hold"
    ROCKET_FOLLOW = "RocketFollow"
    COMPLETE = "Complete"


@dataclass(frozen=True)
class CameraState:
    yaw: float
    pitch: float
    radius: float


@dataclass(frozen=True)
class Vantage:
    yaw: float
    pitch: float


@dataclass(frozen=True)
class ScriptSchedule:
    pre_roll_end: float
    rocket_end: float


@dataclass(frozen=True)
class ScriptTargets:
    phase: CameraPhase
    yaw: float
    pitch: float
    radius: float


def clamp01(x: float) -> float:
    return min(1.0, max(0.0, x))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp_angle(a: float, b: float, t: float) -> float:
    """Interpolate from ``a`` towards ``b`` along the shorter arc."""

    diff = (b - a + math.pi) % (2.0 * math.pi) - math.pi
    return a + diff * t


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    t = clamp01((x - edge0) / max(1e-9, edge1 - edge0))
    return t * t * (3.0 - 2.0 * t)


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


def vantage_for_progress(p: float, cfg: CameraCfg = CAMERA_CFG) -> Vantage:
    """Viewing angle for a journey that is ``p`` complete.

    Yaw swings from ahead of the rocket to side-on by the halfway point and
    then round behind it; pitch drops from almost top-down to near the
    orbital plane between 10% and 90%.
    """

    if p <= 0.5:
        yaw = lerp(YAW_AHEAD, YAW_SIDE, smoothstep(0.0, 0.5, p))
    else:
        yaw = lerp(YAW_SIDE, YAW_BEHIND, smoothstep(0.5, 1.0, p))
    pitch = lerp(cfg.max_pitch_rad * 0.95, PITCH_LOW, smoothstep(0.1, 0.9, p))
    return Vantage(yaw=yaw, pitch=pitch)


@dataclass(frozen=True)
class ScriptedSequence:
    """One run of the scripted camera, anchored at ``start_ms``.

    Pitch targets always stay at the pitch the camera had when the sequence
    started; only yaw and radius are driven.
    """

    start_ms: float
    camera_start: CameraState
    vantage_start: Vantage
    vantage_end: Vantage
    timing: TimingCfg = TIMING_CFG
    camera_cfg: CameraCfg = CAMERA_CFG

    @property
    def schedule(self) -> ScriptSchedule:
        return ScriptSchedule(
            pre_roll_end=self.start_ms + self.timing.pre_roll_ms,
            rocket_end=self.start_ms + self.timing.sequence_ms,
        )

    def finished(self, now_ms: float) -> bool:
        return now_ms >= self.schedule.rocket_end

    def targets(self, now_ms: float) -> ScriptTargets:
        timing = self.timing
        elapsed = max(0.0, now_ms - self.start_ms)
        pitch = self.camera_start.pitch
        radius = self.camera_cfg.initial_radius

        if elapsed < timing.camera_move_ms:
            u = clamp01(elapsed / timing.camera_move_ms) if timing.camera_move_ms > 0 else 1.0
            yaw = lerp_angle(self.camera_start.yaw, self.vantage_start.yaw, u)
            return ScriptTargets(CameraPhase.PRE_ROLL_MOVE, yaw, pitch, radius)

        if elapsed < timing.pre_roll_ms:
            return ScriptTargets(CameraPhase.HOLD, self.vantage_start.yaw, pitch, radius)

        if timing.habit_travel_anim_ms > 0:
            alpha = clamp01((elapsed - timing.pre_roll_ms) / timing.habit_travel_anim_ms)
        else:
            alpha = 1.0
        yaw = lerp_angle(self.vantage_start.yaw, self.vantage_end.yaw, ease_in_out_cubic(alpha))
        return ScriptTargets(CameraPhase.ROCKET_FOLLOW, yaw, pitch, radius)


__all__ = [
    "CameraPhase",
    "CameraState",
    "ScriptSchedule",
    "ScriptTargets",
    "ScriptedSequence",
    "Vantage",
    "clamp01",
    "ease_in_out_cubic",
    "lerp",
    "lerp_angle",
    "smoothstep",
    "vantage_for_progress",
]
