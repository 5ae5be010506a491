# src/orrery_pygame.py
import json
import sys
import time
from pathlib import Path

import numpy as np
import pygame

from orrery.core.bodies import Moon, Planet, distance_km
from orrery.core.config import CAMERA_CFG, RENDER_CFG, TIMING_CFG
from orrery.core.logging_utils import RunLogger
from orrery.core.model import Traveler, TravelProgress
from orrery.core.paths import surface_endpoints
from orrery.core.projection import orbit_trail
from orrery.core.timekeeping import MS_PER_DAY, Clock, FrameLimiter, FrameTimer
from orrery.data.bodies import BODY_DEFINITIONS, DEFAULT_STARTING_LOCATION, build_registry
from orrery.render.camera import CameraController
from orrery.render.draw import (
    downsample_points,
    draw_body,
    draw_orbit_line,
    draw_rocket,
    draw_starfield,
    draw_text_panel,
    generate_starfield,
    get_text_surface,
    hex_to_rgb,
    load_font,
)
from orrery.render.viewport import Viewport
from orrery.scene import SolarScene


SETTINGS_DIR = Path.home() / ".orrery"
SETTINGS_PATH = SETTINGS_DIR / "settings.json"

# habits needed to cover one journey
HABITS_PER_JOURNEY = 4
TRAIL_REFRESH_MS = 1_000.0
DEMO_FRIEND_IDS = ("friend-ada", "friend-grace")


def load_user_settings() -> dict[str, object]:
    """Return persisted runtime settings if the JSON file is readable."""

    try:
        with SETTINGS_PATH.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def save_user_settings(settings: dict[str, object]) -> None:
    """Persist runtime settings; a failed write only loses the preferences."""

    try:
        SETTINGS_DIR.mkdir(parents=True, exist_ok=True)
        with SETTINGS_PATH.open("w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2, sort_keys=True)
    except OSError as exc:
        print(f"could not save settings to {SETTINGS_PATH}: {exc}", file=sys.stderr)


def travel_route() -> list[str]:
    return [body.name for body in BODY_DEFINITIONS if isinstance(body, (Planet, Moon))]


def next_destination(current: str) -> str:
    route = travel_route()
    if current not in route:
        return route[0]
    return route[(route.index(current) + 1) % len(route)]


def main():
    pygame.init()
    pygame.display.set_caption("Orrery - travel camera")
    user_settings = load_user_settings()

    width = int(user_settings.get("width", RENDER_CFG.width))
    height = int(user_settings.get("height", RENDER_CFG.height))
    screen = pygame.display.set_mode((width, height), pygame.RESIZABLE | pygame.DOUBLEBUF)
    font = load_font(["consolas", "menlo", "dejavusansmono"], 15)
    font_fps = pygame.font.SysFont("consolas", 14)

    clock = Clock()
    registry = build_registry(clock)
    camera = CameraController(clock)
    starting = str(user_settings.get("starting_location", DEFAULT_STARTING_LOCATION))
    if starting not in registry:
        starting = DEFAULT_STARTING_LOCATION
    scene = SolarScene(
        registry,
        camera,
        TravelProgress(starting_location=starting),
        level=int(user_settings.get("level", 1)),
        visited=user_settings.get("visited", []),
        skip_animation=bool(user_settings.get("skip_animation", False)),
    )
    scene.set_interactive(True)

    viewport = Viewport((width, height))
    starfield = generate_starfield(RENDER_CFG.starfield_count, size=(width, height))
    show_trails = bool(user_settings.get("show_trails", True))
    paused = False
    logger: RunLogger | None = None
    trail_cache: dict[str, tuple[float, np.ndarray]] = {}

    dragging = False
    drag_last_pos = (0, 0)
    drag_timer = FrameTimer()
    drag_velocity = (0.0, 0.0)
    last_click_ms = -1e9

    limiter = FrameLimiter(TIMING_CFG.render_max_fps)
    frame_clock = pygame.time.Clock()
    result = scene.frame()

    def close_logger():
        nonlocal logger
        if logger is not None:
            logger.close()
            logger = None
        scene.recorder = None

    def init_run_logging() -> None:
        nonlocal logger
        close_logger()
        logger = RunLogger()
        progress = scene.progress
        logger.write_meta(
            {
                "starting_location": progress.starting_location,
                "target": progress.target,
                "initial_distance_km": progress.initial_distance,
                "clock_offset_ms": clock.offset_ms,
                "camera_move_ms": TIMING_CFG.camera_move_ms,
                "camera_hold_ms": TIMING_CFG.camera_hold_ms,
                "habit_travel_anim_ms": TIMING_CFG.habit_travel_anim_ms,
                "initial_radius": CAMERA_CFG.initial_radius,
                "skip_animation": scene.skip_animation,
            }
        )
        scene.recorder = logger

    def collect_user_settings() -> dict[str, object]:
        return {
            "width": width,
            "height": height,
            "show_trails": bool(show_trails),
            "skip_animation": bool(scene.skip_animation),
            "starting_location": scene.progress.starting_location,
            "level": scene.level,
            "visited": sorted(scene.visited),
        }

    def quit_app():
        save_user_settings(collect_user_settings())
        close_logger()
        pygame.quit()
        sys.exit()

    def complete_habit() -> None:
        progress = scene.progress
        if not progress.travelling:
            destination = next_destination(progress.starting_location)
            total = distance_km(registry, progress.starting_location, destination)
            departing = progress.depart(destination, total)
            scene.set_progress(departing)
            scene.set_friends(
                Traveler(uid=uid, progress=departing, name=uid.split("-", 1)[1])
                for uid in DEMO_FRIEND_IDS
            )
            return
        step = progress.initial_distance / HABITS_PER_JOURNEY
        scene.set_progress(progress.advance(step))

    def trail_points(name: str, now_ms: float) -> np.ndarray:
        cached = trail_cache.get(name)
        if cached is not None and now_ms - cached[0] < TRAIL_REFRESH_MS:
            return cached[1]
        points = orbit_trail(registry, name, now_ms, segments=RENDER_CFG.trail_max_points)
        trail_cache[name] = (now_ms, points)
        return points

    def draw_frame() -> None:
        viewport.set_pose(result.pose)
        screen.fill(RENDER_CFG.background_color)
        draw_starfield(screen, starfield, camera.state.yaw)

        visible = [view for view in result.bodies if view.visible]
        if show_trails:
            trail_layer = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
            for view in visible:
                if view.kind == "star":
                    continue
                projected = viewport.project_polyline(trail_points(view.name, result.now_ms))
                color = (*hex_to_rgb(view.color), RENDER_CFG.trail_alpha)
                draw_orbit_line(trail_layer, color, downsample_points(projected, RENDER_CFG.trail_max_points), 1)
            screen.blit(trail_layer, (0, 0))

        progress = scene.progress
        if progress.travelling:
            endpoints = surface_endpoints(
                scene.visual_position(progress.starting_location, result.now_ms),
                scene.visual_radius(progress.starting_location),
                scene.visual_position(progress.target, result.now_ms),
                scene.visual_radius(progress.target),
            )
            path = viewport.project_polyline(np.array(endpoints))
            if len(path) == 2:
                path_layer = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
                pygame.draw.line(path_layer, RENDER_CFG.path_color, path[0], path[1], 1)
                screen.blit(path_layer, (0, 0))

        for view in sorted(visible, key=lambda v: -viewport.depth(v.position)):
            screen_pos = viewport.world_to_screen(view.position)
            if screen_pos is None:
                continue
            radius_px = viewport.projected_radius(view.position, view.radius)
            highlight = view.name in (progress.starting_location, progress.target)
            draw_body(
                screen,
                screen_pos,
                radius_px,
                hex_to_rgb(view.color),
                render_cfg=RENDER_CFG,
                highlight=highlight,
            )

        for uid, (pos, aim) in result.friends.items():
            screen_pos = viewport.world_to_screen(pos)
            if screen_pos is not None:
                draw_rocket(
                    screen,
                    screen_pos,
                    viewport.world_to_screen(aim),
                    color=RENDER_CFG.friend_rocket_color,
                    size=RENDER_CFG.rocket_min_pixels,
                )

        rocket_pos = viewport.world_to_screen(result.user.pos)
        if rocket_pos is not None:
            draw_rocket(
                screen,
                rocket_pos,
                viewport.world_to_screen(result.user.aim),
                color=RENDER_CFG.rocket_color,
                size=RENDER_CFG.rocket_min_pixels + 2,
            )

        state = camera.state
        if progress.travelling:
            journey = f"{progress.starting_location} -> {progress.target}  {progress.to_fraction * 100:.0f}%"
        else:
            journey = f"At {progress.starting_location}"
        lines = [
            journey,
            f"Date: {clock.now():%Y-%m-%d %H:%M} UTC",
            f"Camera: {result.phase.value}  yaw {state.yaw:.2f}  pitch {state.pitch:.2f}  r {state.radius:.3f}",
            f"Skip animation: {'on' if scene.skip_animation else 'off'}   Logging: {'on' if logger else 'off'}",
            "SPACE habit  T +1 day  K skip  R trails  P pause  L log",
        ]
        if paused:
            lines.append("PAUSED")
        draw_text_panel(screen, lines, font, (16, 16), render_cfg=RENDER_CFG)

        fps_text = get_text_surface(font_fps, f"FPS: {frame_clock.get_fps():.1f}", RENDER_CFG.hud_text_color)
        fps_text = fps_text.copy()
        fps_text.set_alpha(RENDER_CFG.fps_text_alpha)
        screen.blit(fps_text, fps_text.get_rect(bottomright=(width - 16, height - 16)))

    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                quit_app()
            elif event.type == pygame.VIDEORESIZE:
                width, height = event.w, event.h
                screen = pygame.display.set_mode((width, height), pygame.RESIZABLE | pygame.DOUBLEBUF)
                viewport.update_size((width, height))
                starfield = generate_starfield(RENDER_CFG.starfield_count, size=(width, height))
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    quit_app()
                elif event.key == pygame.K_SPACE:
                    complete_habit()
                elif event.key == pygame.K_t:
                    clock.advance(MS_PER_DAY)
                    trail_cache.clear()
                elif event.key == pygame.K_k:
                    scene.skip_animation = not scene.skip_animation
                elif event.key == pygame.K_r:
                    show_trails = not show_trails
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key == pygame.K_l:
                    if logger is None:
                        init_run_logging()
                    else:
                        close_logger()
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                now_click = time.perf_counter() * 1000.0
                if now_click - last_click_ms <= RENDER_CFG.double_click_ms:
                    camera.cycle_double_tap()
                    last_click_ms = -1e9
                    continue
                last_click_ms = now_click
                dragging = True
                drag_last_pos = event.pos
                drag_timer.tick()
                drag_velocity = (0.0, 0.0)
                camera.begin_pan()
            elif event.type == pygame.MOUSEMOTION and dragging:
                dx = event.pos[0] - drag_last_pos[0]
                dy = event.pos[1] - drag_last_pos[1]
                if dx != 0 or dy != 0:
                    dt_s = max(1e-3, drag_timer.tick())
                    drag_velocity = (dx / dt_s, dy / dt_s)
                    camera.update_pan(dx, dy, width, height)
                    drag_last_pos = event.pos
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and dragging:
                dragging = False
                camera.end_pan(drag_velocity[0], drag_velocity[1], width, height)
            elif event.type == pygame.MOUSEWHEEL and event.y != 0:
                camera.begin_pinch()
                camera.update_pinch(1.1 ** event.y)

        if paused:
            frame_clock.tick(20)
            draw_frame()
            pygame.display.flip()
            continue

        if not limiter.ready(time.perf_counter() * 1000.0):
            pygame.time.wait(1)
            continue

        result = scene.frame()
        draw_frame()
        pygame.display.flip()
        frame_clock.tick()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pygame.quit()
        sys.exit()
