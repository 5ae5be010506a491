"""Tests for the per-frame scene driver."""
import csv
import math

import numpy as np
import pytest

from orrery.core.logging_utils import RunLogger
from orrery.core.model import Traveler, TravelProgress
from orrery.core.paths import surface_endpoints, travel_position
from orrery.render.camera import CameraController
from orrery.render.sequencer import CameraPhase
from orrery.scene import SolarScene

from conftest import J2000_MS

T0 = J2000_MS


def _scene(registry, progress, **kwargs):
    camera = CameraController(registry.clock)
    return SolarScene(registry, camera, progress, **kwargs)


def _journey(distance=50.0, target="Mars", start="Earth"):
    return TravelProgress(start).depart(target, 100.0).advance(distance)


def _read_events(logger):
    logger.close()
    with logger.events_path.open(newline="", encoding="utf-8") as fh:
        return [row["type"] for row in csv.DictReader(fh)]


# ── Visibility ───────────────────────────────────────────────────────

class TestVisibility:

    def _visible(self, scene):
        return {view.name for view in scene.body_views() if view.visible}

    def test_home_system_only(self, registry):
        visible = self._visible(_scene(registry, TravelProgress("Earth")))
        assert visible == {"Sun", "Earth", "The Moon"}

    def test_target_system_is_shown(self, registry):
        visible = self._visible(_scene(registry, TravelProgress("Earth").depart("Mars", 1.0)))
        assert {"Mars", "Phobos", "Deimos"} <= visible
        assert "Io" not in visible

    def test_visited_planets_are_shown(self, registry):
        visible = self._visible(_scene(registry, TravelProgress("Earth"), level=3, visited=["Jupiter"]))
        assert "Jupiter" in visible
        assert "Mars" not in visible

    def test_level_alone_does_not_reveal_planets(self, registry):
        visible = self._visible(_scene(registry, TravelProgress("Mars"), level=5))
        assert "Venus" not in visible
        assert "Mercury" not in visible

    def test_always_render_planet_needs_unlock(self, registry):
        locked = self._visible(_scene(registry, TravelProgress("Mars"), level=0))
        assert locked == {"Sun", "Mars", "Phobos", "Deimos"}
        unlocked = self._visible(_scene(registry, TravelProgress("Mars"), level=1))
        assert "Earth" in unlocked
        assert "The Moon" not in unlocked

    def test_kinds_and_sizes(self, registry):
        views = {view.name: view for view in _scene(registry, TravelProgress("Earth")).body_views()}
        assert views["Sun"].kind == "star"
        assert views["Earth"].kind == "planet"
        assert views["The Moon"].kind == "moon"
        assert views["Earth"].radius == pytest.approx(0.05)
        assert views["Jupiter"].radius > views["Earth"].radius > views["The Moon"].radius


# ── Travel animation ─────────────────────────────────────────────────

class TestTravelAnimation:

    def _expected_user_pos(self, scene, fraction, now):
        start = scene.visual_position("Earth", now)
        target = scene.visual_position("Mars", now)
        endpoints = surface_endpoints(start, scene.visual_radius("Earth"), target, scene.visual_radius("Mars"))
        return travel_position(endpoints, fraction)

    def test_not_interactive_holds_at_previous_fraction(self, registry):
        scene = _scene(registry, _journey())
        result = scene.frame(T0)
        assert result.rocket_alpha == 0.0
        assert not scene.anim_synced
        assert not scene.camera.scripted_active
        np.testing.assert_allclose(result.user.pos, self._expected_user_pos(scene, 0.0, T0))

    def test_full_timeline(self, registry):
        scene = _scene(registry, _journey())
        scene.set_interactive(True, T0)
        assert scene.camera.phase is CameraPhase.PRE_ROLL_MOVE

        assert scene.frame(T0 + 1_000.0).rocket_alpha == 0.0
        assert scene.frame(T0 + 2_500.0).rocket_alpha == 0.0

        halfway = scene.frame(T0 + 5_000.0)
        assert halfway.rocket_alpha == pytest.approx(0.5)
        assert halfway.phase is CameraPhase.ROCKET_FOLLOW
        np.testing.assert_allclose(halfway.user.pos, self._expected_user_pos(scene, 0.25, T0 + 5_000.0))

        scene.frame(T0 + 7_500.0)
        assert scene.anim_synced
        assert not scene.progress.has_pending_delta
        settled = scene.frame(T0 + 7_600.0)
        assert settled.rocket_alpha == 0.0
        np.testing.assert_allclose(settled.user.pos, self._expected_user_pos(scene, 0.5, T0 + 7_600.0))

        assert scene.frame(T0 + 8_500.0).phase is CameraPhase.COMPLETE

    def test_progress_change_while_interactive_starts_sequence(self, registry):
        scene = _scene(registry, TravelProgress("Earth").depart("Mars", 100.0))
        scene.set_interactive(True, T0)
        assert not scene.camera.scripted_active
        scene.set_progress(scene.progress.advance(10.0), T0 + 100.0)
        assert scene.camera.scripted_active
        assert scene.camera.sequence.start_ms == T0 + 100.0

    def test_progress_without_delta_counts_as_synced(self, registry):
        scene = _scene(registry, _journey())
        scene.set_progress(scene.progress.synced(), T0)
        assert scene.anim_synced

    def test_leaving_interactive_freezes_the_rocket(self, registry):
        scene = _scene(registry, _journey())
        scene.set_interactive(True, T0)
        scene.set_interactive(False, T0 + 4_000.0)
        assert scene.frame(T0 + 5_000.0).rocket_alpha == 0.0

    def test_skip_animation_syncs_immediately(self, registry, tmp_path):
        logger = RunLogger(tmp_path)
        scene = _scene(registry, _journey(), skip_animation=True, recorder=logger)
        scene.set_interactive(True, T0)
        assert scene.anim_synced
        assert not scene.camera.scripted_active
        assert scene.progress.previous_distance_traveled == 50.0
        assert _read_events(logger) == ["skip"]

    def test_arrival_lands_on_target(self, registry):
        scene = _scene(registry, _journey(distance=100.0))
        scene.set_interactive(True, T0)
        scene.frame(T0 + 7_500.0)
        assert scene.progress == TravelProgress("Mars")
        assert "Mars" in scene.visited

    def test_look_target_falls_back_to_user(self, registry):
        scene = _scene(registry, TravelProgress("Earth"))
        result = scene.frame(T0)
        np.testing.assert_allclose(result.user.pos, scene.visual_position("Earth", T0))
        np.testing.assert_allclose(result.pose.look_at, result.user.pos)


# ── Camera integration ───────────────────────────────────────────────

class TestCameraIntegration:

    def test_short_hop_locks_side_on(self, registry):
        scene = _scene(registry, _journey(distance=10.0, start="Mars", target="Phobos"))
        scene.set_interactive(True, T0)
        assert scene.camera.sequence.vantage_start.yaw == pytest.approx(math.pi / 2)
        assert scene.camera.sequence.vantage_end.yaw == pytest.approx(math.pi / 2)

    def test_long_hop_follows_progress(self, registry):
        scene = _scene(registry, _journey(distance=10.0))
        scene.set_interactive(True, T0)
        assert scene.camera.sequence.vantage_start.yaw == pytest.approx(0.0)

    def test_camera_kept_outside_start_body(self, registry):
        scene = _scene(registry, _journey(distance=0.0))
        earth = scene.visual_position("Earth", T0)
        clearance = scene.camera.cfg.collision_clearance
        for yaw in (0.0, math.pi / 2, math.pi, 3 * math.pi / 2):
            scene.camera.set_orbit(yaw=yaw, pitch=0.0)
            pose = scene.frame(T0, auto_rotate=False).pose
            assert np.linalg.norm(pose.position - earth) >= scene.visual_radius("Earth") + clearance - 1e-9

    def test_recorder_sees_start_and_complete(self, registry, tmp_path):
        logger = RunLogger(tmp_path)
        scene = _scene(registry, _journey(), recorder=logger)
        scene.set_interactive(True, T0)
        for now in (1_000.0, 5_000.0, 8_500.0, 9_000.0):
            scene.frame(T0 + now)
        assert _read_events(logger) == ["sequence_start", "sequence_complete"]
        with logger.timeseries_path.open(newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
        assert len(rows) == 4
        assert rows[1]["phase"] == "RocketFollow"
        assert float(rows[1]["alpha"]) == pytest.approx(0.5)

    def test_gesture_cancel_is_logged(self, registry, tmp_path):
        logger = RunLogger(tmp_path)
        scene = _scene(registry, _journey(), recorder=logger)
        scene.set_interactive(True, T0)
        scene.frame(T0 + 500.0)
        scene.camera.begin_pan()
        scene.frame(T0 + 600.0)
        assert scene.camera.phase is CameraPhase.IDLE
        assert _read_events(logger) == ["sequence_start", "sequence_cancel"]


# ── Friends ──────────────────────────────────────────────────────────

class TestFriends:

    def test_friends_fan_out_on_the_start_surface(self, registry):
        departing = TravelProgress("Earth").depart("Mars", 100.0)
        scene = _scene(registry, departing)
        scene.set_friends([Traveler("b", departing), Traveler("a", departing)])
        result = scene.frame(T0)
        earth = scene.visual_position("Earth", T0)
        radius = scene.visual_radius("Earth")
        a, b = result.friends["a"].pos, result.friends["b"].pos
        for pos in (a, b):
            assert np.linalg.norm(pos - earth) == pytest.approx(radius)
            assert not np.allclose(pos, result.user.pos)
        assert not np.allclose(a, b)

    def test_lone_friend_in_flight_uses_centre_line(self, registry):
        scene = _scene(registry, TravelProgress("Earth"))
        friend = TravelProgress("Earth").depart("Mars", 100.0).advance(50.0).synced()
        scene.set_friends([Traveler("a", friend)])
        result = scene.frame(T0)
        start = scene.visual_position("Earth", T0)
        target = scene.visual_position("Mars", T0)
        endpoints = surface_endpoints(start, scene.visual_radius("Earth"), target, scene.visual_radius("Mars"))
        np.testing.assert_allclose(result.friends["a"].pos, travel_position(endpoints, 0.5))

    def test_friends_in_flight_are_offset(self, registry):
        scene = _scene(registry, TravelProgress("Earth"))
        friend = TravelProgress("Earth").depart("Mars", 100.0).advance(50.0).synced()
        scene.set_friends([Traveler("a", friend), Traveler("b", friend)])
        result = scene.frame(T0)
        gap = np.linalg.norm(result.friends["a"].pos - result.friends["b"].pos)
        assert gap > 0.0

    def test_idle_friend_sits_at_body_centre(self, registry):
        scene = _scene(registry, TravelProgress("Earth"))
        scene.set_friends([Traveler("a", TravelProgress("Mars"))])
        result = scene.frame(T0)
        np.testing.assert_allclose(result.friends["a"].pos, scene.visual_position("Mars", T0))

    def test_removed_friends_are_dropped(self, registry):
        departing = TravelProgress("Earth").depart("Mars", 100.0)
        scene = _scene(registry, departing)
        scene.set_friends([Traveler("a", departing), Traveler("b", departing)])
        scene.frame(T0)
        scene.set_friends([Traveler("b", departing)])
        assert [t.uid for t in scene.friends] == ["b"]
        assert set(scene.frame(T0).friends) == {"b"}
