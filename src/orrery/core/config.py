"""Configuration dataclasses for the orrery scene and camera."""
from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class SceneCfg:
    au_km: float = 149_597_870.7
    j2000_jd: float = 2_451_545.0
    # 10,000,000 km => 1 scene unit
    km_to_scene: float = 1e-7
    body_radius_multiplier: float = 0.05
    size_exponent: float = 0.6
    min_scale_ratio: float = 1e-6
    min_body_radius_km: float = 100.0
    orbit_offset_multiplier: float = 30.0
    trail_length_multiplier: float = 0.5
    trail_segments: int = 500
    landing_clearance: float = 0.005
    landing_spread_fraction: float = 0.35
    friend_aim_yaw_step_rad: float = 0.12


@dataclass(frozen=True)
class CameraCfg:
    max_pitch_rad: float = 1.1
    initial_radius: float = 0.1
    initial_yaw: float = 2.0
    auto_rotate_yaw_speed: float = 0.001
    smoothing_yaw: float = 0.15
    smoothing_pitch: float = 0.18
    smoothing_radius: float = 0.2
    zoom_min_radius: float = 0.05
    zoom_max_radius: float = 20_000.0
    double_tap_radii: tuple[float, ...] = (0.1, 0.4, 2.0)
    pan_yaw_per_full_drag: float = 2.0 * math.pi
    pan_pitch_per_full_drag: float = math.pi
    inertia_frames_per_second: float = 60.0
    yaw_velocity_clamp: float = 0.2
    pitch_velocity_clamp: float = 0.15
    inertia_friction: float = 0.92
    inertia_stop_epsilon: float = 1e-6
    plane_normal_eps: float = 1e-8
    helper_axis_threshold: float = 0.9
    ecliptic_up: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 1.0], dtype=float)
    )
    collision_clearance: float = 0.01
    yaw_side_on_distance_cutoff: float = 0.3


@dataclass(frozen=True)
class TimingCfg:
    habit_travel_anim_ms: float = 5_000.0
    camera_move_ms: float = 2_000.0
    camera_hold_ms: float = 500.0
    render_max_fps: float = 60.0
    sync_alpha_threshold: float = 0.999

    @property
    def pre_roll_ms(self) -> float:
        return self.camera_move_ms + self.camera_hold_ms

    @property
    def sequence_ms(self) -> float:
        return self.pre_roll_ms + self.habit_travel_anim_ms


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1000
    height: int = 800
    fov_deg: float = 60.0
    near: float = 0.01
    far: float = 20_000.0
    background_color: tuple[int, int, int] = (16, 16, 24)
    hud_text_color: tuple[int, int, int] = (234, 241, 255)
    hud_shadow_color: tuple[int, int, int, int] = (10, 15, 30, 120)
    rocket_color: tuple[int, int, int] = (255, 140, 0)
    friend_rocket_color: tuple[int, int, int] = (120, 200, 255)
    rocket_min_pixels: int = 6
    path_color: tuple[int, int, int, int] = (255, 255, 255, 90)
    trail_alpha: int = 150
    trail_max_points: int = 240
    min_body_pixels: int = 2
    starfield_count: int = 300
    fps_text_alpha: int = int(255 * 0.6)
    double_click_ms: int = 250


SCENE_CFG = SceneCfg()
CAMERA_CFG = CameraCfg()
TIMING_CFG = TimingCfg()
RENDER_CFG = RenderCfg()


__all__ = [
    "CAMERA_CFG",
    "RENDER_CFG",
    "SCENE_CFG",
    "TIMING_CFG",
    "CameraCfg",
    "RenderCfg",
    "SceneCfg",
    "TimingCfg",
]
