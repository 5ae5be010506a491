"""Per-frame driver for the travel view.

``SolarScene`` owns no rendering. Each call to :meth:`SolarScene.frame`
works out where every body and rocket is drawn, advances the camera and
reports what happened, leaving the drawing itself to the caller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from orrery.core.bodies import BodyRegistry, Moon, Planet, Star, relevant_systems
from orrery.core.config import CAMERA_CFG, SCENE_CFG, TIMING_CFG, CameraCfg, SceneCfg, TimingCfg
from orrery.core.logging_utils import RunLogger
from orrery.core.model import Traveler, TravelProgress
from orrery.core.paths import (
    FanOutAssigner,
    PosAim,
    aim_position,
    friend_surface_pos_aim,
    friend_travel_pos_aim,
    surface_endpoints,
    travel_position,
)
from orrery.core.projection import apparent_radius, display_position
from orrery.render.camera import CameraController, CameraPose
from orrery.render.collision import CollisionSphere, make_collision_resolver
from orrery.render.sequencer import CameraPhase, ease_in_out_cubic


@dataclass(frozen=True)
class BodyView:
    name: str
    kind: str
    position: np.ndarray
    radius: float
    color: int
    visible: bool


@dataclass(frozen=True)
class FrameResult:
    now_ms: float
    pose: CameraPose
    phase: CameraPhase
    user: PosAim
    rocket_alpha: float
    bodies: list[BodyView]
    friends: dict[str, PosAim] = field(default_factory=dict)


class SolarScene:
    def __init__(
        self,
        registry: BodyRegistry,
        camera: CameraController,
        progress: TravelProgress,
        *,
        level: int = 0,
        visited: Iterable[str] = (),
        skip_animation: bool = False,
        recorder: RunLogger | None = None,
        scene_cfg: SceneCfg = SCENE_CFG,
        camera_cfg: CameraCfg = CAMERA_CFG,
        timing: TimingCfg = TIMING_CFG,
    ) -> None:
        self.registry = registry
        self.camera = camera
        self.clock = registry.clock
        self.level = level
        self.visited: set[str] = set(visited)
        self.skip_animation = skip_animation
        self.recorder = recorder
        self._scene_cfg = scene_cfg
        self._camera_cfg = camera_cfg
        self._timing = timing

        self._progress = progress
        self._friends: dict[str, Traveler] = {}
        self._surface_fan = FanOutAssigner(scene_cfg)
        self._travel_fan = FanOutAssigner(scene_cfg)

        self._interactive = False
        self._anim_start: float | None = None
        self._anim_synced = not progress.has_pending_delta
        self._was_scripted = False
        self._views: list[BodyView] = []

        camera.set_collision_resolver(make_collision_resolver(self._collision_spheres, camera_cfg))

    # State ----------------------------------------------------------------

    @property
    def progress(self) -> TravelProgress:
        return self._progress

    @property
    def interactive(self) -> bool:
        return self._interactive

    @property
    def anim_synced(self) -> bool:
        return self._anim_synced

    @property
    def friends(self) -> list[Traveler]:
        return list(self._friends.values())

    def set_friends(self, travelers: Iterable[Traveler]) -> None:
        incoming = {t.uid: t for t in travelers}
        for uid in set(self._friends) - set(incoming):
            self._surface_fan.forget(uid)
            self._travel_fan.forget(uid)
        self._friends = incoming

    def set_progress(self, progress: TravelProgress, now_ms: float | None = None) -> None:
        """Replace the travel progress, animating any new distance delta."""

        previous = self._progress
        self._progress = progress
        changed = (
            progress.distance_traveled != previous.distance_traveled
            or progress.previous_distance_traveled != previous.previous_distance_traveled
        )
        if not changed:
            return
        if not progress.has_pending_delta:
            self._anim_synced = True
            return
        self._anim_synced = False
        if self._interactive:
            self._start_sequence(self._now(now_ms))

    def set_interactive(self, interactive: bool, now_ms: float | None = None) -> None:
        if interactive == self._interactive:
            return
        self._interactive = interactive
        if not interactive:
            self._anim_start = None
            return
        now = self._now(now_ms)
        self._anim_start = now
        if self._progress.has_pending_delta:
            self._start_sequence(now)

    def sync(self) -> None:
        """Mark the pending delta as shown and land if the journey is over."""

        progress = self._progress.synced()
        if progress.arrived:
            if progress.target is not None:
                self.visited.add(progress.target)
            progress = progress.landed()
        self._progress = progress
        self._anim_synced = True

    # Geometry -------------------------------------------------------------

    def visual_radius(self, name: str) -> float:
        return apparent_radius(self.registry.get(name).radius_km, cfg=self._scene_cfg)

    def visual_position(self, name: str, now_ms: float | None = None) -> np.ndarray:
        return display_position(self.registry, name, self._now(now_ms), self._scene_cfg)

    def _is_visible(self, body, systems: set[str]) -> bool:
        if isinstance(body, Star):
            return True
        if isinstance(body, Moon):
            return body.orbits in systems
        if isinstance(body, Planet):
            progress = self._progress
            on_route = (
                body.name in self.visited
                or body.name in (progress.starting_location, progress.target)
            )
            # Only always-render planets are shown on unlock alone.
            if body.always_render_if_discovered:
                return on_route or self.level >= body.min_level
            return on_route
        return False

    def body_views(self, now_ms: float | None = None) -> list[BodyView]:
        now = self._now(now_ms)
        progress = self._progress
        systems = relevant_systems(self.registry, progress.starting_location, progress.target)
        views = []
        for body in self.registry:
            kind = type(body).__name__.lower()
            views.append(
                BodyView(
                    name=body.name,
                    kind=kind,
                    position=self.visual_position(body.name, now),
                    radius=self.visual_radius(body.name),
                    color=body.color,
                    visible=self._is_visible(body, systems),
                )
            )
        return views

    def _collision_spheres(self) -> list[CollisionSphere]:
        return [
            CollisionSphere(view.position, view.radius)
            for view in self._views
            if view.visible and view.kind in ("planet", "moon")
        ]

    def _centers(self, progress: TravelProgress, now: float) -> tuple[np.ndarray, np.ndarray | None]:
        start = self.visual_position(progress.starting_location, now)
        if progress.target is None:
            return start, None
        return start, self.visual_position(progress.target, now)

    def _lock_side_on(self, now: float) -> bool:
        start, target = self._centers(self._progress, now)
        if target is None:
            return False
        return float(np.linalg.norm(target - start)) < self._camera_cfg.yaw_side_on_distance_cutoff

    def _rocket_alpha(self, now: float) -> float:
        animate = self._interactive and not self._anim_synced and not self.skip_animation
        if not animate or self._anim_start is None:
            return 0.0
        elapsed = max(0.0, now - self._anim_start)
        pre_roll = self._timing.pre_roll_ms
        if elapsed <= pre_roll:
            return 0.0
        return min(1.0, (elapsed - pre_roll) / self._timing.habit_travel_anim_ms)

    def _traveler_pos_aim(self, progress: TravelProgress, ease: float, now: float) -> PosAim:
        start_center, target_center = self._centers(progress, now)
        if target_center is None or not progress.travelling:
            return PosAim(start_center, start_center)
        start_radius = self.visual_radius(progress.starting_location)
        target_radius = self.visual_radius(progress.target)
        endpoints = surface_endpoints(
            start_center, start_radius, target_center, target_radius, self._scene_cfg
        )
        pos = travel_position(endpoints, progress.fraction_at(ease))
        aim = aim_position(start_center, target_center, target_radius, self._scene_cfg)
        return PosAim(pos, aim)

    def _friend_positions(self, now: float) -> dict[str, PosAim]:
        user = self._progress
        at_start = {
            uid: t.progress.travel_key
            for uid, t in self._friends.items()
            if t.progress.travelling and t.progress.at_start
        }
        in_flight = {
            uid: t.progress.travel_key
            for uid, t in self._friends.items()
            if t.progress.travelling and not t.progress.at_start
        }
        surface_offsets = self._surface_fan.assign(
            at_start, user.travel_key if user.travelling and user.at_start else None
        )
        travel_offsets = self._travel_fan.assign(
            in_flight, user.travel_key if user.travelling and not user.at_start else None
        )

        result: dict[str, PosAim] = {}
        for uid, traveler in self._friends.items():
            progress = traveler.progress
            start_center, target_center = self._centers(progress, now)
            if target_center is None or not progress.travelling:
                result[uid] = PosAim(start_center, start_center)
                continue
            start_radius = self.visual_radius(progress.starting_location)
            if uid in surface_offsets:
                offset = surface_offsets[uid]
                result[uid] = friend_surface_pos_aim(
                    start_center,
                    target_center,
                    start_radius,
                    self.visual_radius(progress.target),
                    offset.theta,
                    offset.yaw,
                    self._scene_cfg,
                )
            elif uid not in travel_offsets:
                result[uid] = self._traveler_pos_aim(progress, 1.0, now)
            else:
                base = self._traveler_pos_aim(progress, 1.0, now).pos
                result[uid] = friend_travel_pos_aim(
                    start_center,
                    target_center,
                    base,
                    start_radius,
                    travel_offsets[uid].theta,
                    self._scene_cfg,
                )
        return result

    # Sequencing -----------------------------------------------------------

    def _start_sequence(self, now: float) -> None:
        progress = self._progress
        if self.skip_animation:
            self.camera.stop_scripted_camera()
            self.sync()
            self._log_event(now, "skip", f"to={progress.to_fraction:.4f}")
            return
        self._anim_start = now
        self.camera.start_scripted_camera_from_progress(
            now,
            self.camera.state,
            progress.from_fraction,
            progress.to_fraction,
            lock_side_on_yaw=self._lock_side_on(now),
        )
        self._was_scripted = True
        self._log_event(
            now,
            "sequence_start",
            f"from={progress.from_fraction:.4f} to={progress.to_fraction:.4f}",
        )

    def _log_event(self, now: float, kind: str, details: str = "") -> None:
        if self.recorder is not None:
            self.recorder.log_event(now, kind, details)

    def frame(self, now_ms: float | None = None, *, auto_rotate: bool = True) -> FrameResult:
        now = self._now(now_ms)
        self._views = self.body_views(now)

        alpha = self._rocket_alpha(now)
        user = self._traveler_pos_aim(self._progress, ease_in_out_cubic(alpha), now)
        friends = self._friend_positions(now)

        _, target_center = self._centers(self._progress, now)
        look_target = user.pos if target_center is None else target_center
        pose = self.camera.tick(user.pos, look_target, now_ms=now, auto_rotate=auto_rotate)

        if self._was_scripted and not self.camera.scripted_active:
            self._was_scripted = False
            if self.camera.phase is CameraPhase.COMPLETE:
                self._log_event(now, "sequence_complete")
            else:
                self._log_event(now, "sequence_cancel")

        if not self._anim_synced and self._interactive:
            complete = (
                alpha >= self._timing.sync_alpha_threshold
                or not self._progress.has_pending_delta
            )
            if complete:
                self.sync()

        if self.recorder is not None:
            state = self.camera.state
            self.recorder.log_ts(
                [
                    now,
                    state.yaw,
                    state.pitch,
                    state.radius,
                    self.camera.phase.value,
                    *(float(c) for c in user.pos),
                    alpha,
                ]
            )

        return FrameResult(
            now_ms=now,
            pose=pose,
            phase=self.camera.phase,
            user=user,
            rocket_alpha=alpha,
            bodies=self._views,
            friends=friends,
        )

    def _now(self, now_ms: float | None) -> float:
        return self.clock.now_ms() if now_ms is None else now_ms


__all__ = ["BodyView", "FrameResult", "SolarScene"]
