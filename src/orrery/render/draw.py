from __future__ import annotations

import math
import random
from collections import OrderedDict
from typing import Iterable, Sequence, TYPE_CHECKING

import pygame

if TYPE_CHECKING:  # pragma: no cover
    from orrery.core.config import RenderCfg


Color = tuple[int, int, int] | tuple[int, int, int, int]


def hex_to_rgb(value: int) -> tuple[int, int, int]:
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


_TEXT_SURFACE_CACHE_MAX_SIZE = 256
_TEXT_SURFACE_CACHE: OrderedDict[tuple[int, str, Color], pygame.Surface] = OrderedDict()


def get_text_surface(font: pygame.font.Font, text: str, color: Color) -> pygame.Surface:
    """Return a cached rendered surface for the given font, text and color."""

    key = (id(font), text, color)
    cached = _TEXT_SURFACE_CACHE.get(key)
    if cached is not None:
        _TEXT_SURFACE_CACHE.move_to_end(key)
        return cached
    rendered = font.render(text, True, color)
    _TEXT_SURFACE_CACHE[key] = rendered
    if len(_TEXT_SURFACE_CACHE) > _TEXT_SURFACE_CACHE_MAX_SIZE:
        _TEXT_SURFACE_CACHE.popitem(last=False)
    return rendered


def load_font(preferred_names: Iterable[str], size: int, *, bold: bool = False) -> pygame.font.Font:
    names = list(preferred_names)
    for name in names:
        match = pygame.font.match_font(name, bold=bold)
        if match:
            return pygame.font.Font(match, size)
    return pygame.font.SysFont(names[0] if names else None, size, bold=bold)


def generate_starfield(
    num_stars: int,
    *,
    size: tuple[int, int],
    rng: random.Random | None = None,
) -> list[tuple[tuple[float, float], pygame.Surface, int]]:
    rng = rng or random.Random()
    width, height = size
    stars = []
    for _ in range(num_stars):
        radius = rng.choice([1, 1, 1, 2])
        alpha = rng.randint(60, 140)
        base = rng.randint(200, 240)
        color = (base - rng.randint(10, 25), base - rng.randint(5, 15), base)
        star_surface = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(star_surface, (*color, alpha), (radius, radius), radius)
        stars.append(((rng.uniform(0, width), rng.uniform(0, height)), star_surface, radius))
    return stars


def draw_starfield(
    surface: pygame.Surface,
    starfield: Iterable[tuple[tuple[float, float], pygame.Surface, int]],
    yaw: float,
) -> None:
    """Blit the background stars, sliding them horizontally with the camera yaw."""

    width, height = surface.get_size()
    shift = (yaw / (2.0 * math.pi)) * width
    for (x, y), star_surface, radius in starfield:
        sx = int((x + shift) % width)
        surface.blit(star_surface, (sx - radius, int(y) - radius))


def draw_body(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius_px: float,
    color: tuple[int, int, int],
    *,
    render_cfg: RenderCfg,
    highlight: bool = False,
) -> None:
    radius = max(render_cfg.min_body_pixels, int(round(radius_px)))
    pygame.draw.circle(surface, color, position, radius)
    if highlight:
        pygame.draw.circle(surface, render_cfg.hud_text_color, position, radius + 3, 1)


def draw_rocket(
    surface: pygame.Surface,
    position: tuple[int, int],
    aim: tuple[int, int] | None,
    *,
    color: tuple[int, int, int],
    size: int,
) -> None:
    """Small triangle at ``position`` pointing towards ``aim`` on screen."""

    if aim is None or aim == position:
        pygame.draw.circle(surface, color, position, max(2, size // 2))
        return
    angle = math.atan2(aim[1] - position[1], aim[0] - position[0])
    tip = (position[0] + size * math.cos(angle), position[1] + size * math.sin(angle))
    back = size * 0.6
    left = (
        position[0] + back * math.cos(angle + 2.5),
        position[1] + back * math.sin(angle + 2.5),
    )
    right = (
        position[0] + back * math.cos(angle - 2.5),
        position[1] + back * math.sin(angle - 2.5),
    )
    pygame.draw.polygon(surface, color, [tip, left, right])


def draw_orbit_line(
    surface: pygame.Surface,
    color: Color,
    points: Sequence[tuple[int, int]],
    width: int,
) -> None:
    if len(points) < 2:
        return
    if width <= 1:
        pygame.draw.aalines(surface, color, False, points)
    else:
        pygame.draw.lines(surface, color, False, points, width)
        pygame.draw.aalines(surface, color, False, points)


def downsample_points(points: Sequence, max_points: int) -> list:
    if len(points) <= max_points:
        return list(points)
    step = max(1, math.ceil(len(points) / max_points))
    sampled = list(points[::step])
    if (len(points) - 1) % step:
        sampled.append(points[-1])
    return sampled


def draw_text_panel(
    surface: pygame.Surface,
    lines: Sequence[str],
    font: pygame.font.Font,
    topleft: tuple[int, int],
    *,
    render_cfg: RenderCfg,
) -> None:
    if not lines:
        return
    rendered = [get_text_surface(font, line, render_cfg.hud_text_color) for line in lines]
    padding = 8
    line_gap = 4
    width = max(s.get_width() for s in rendered) + padding * 2
    height = sum(s.get_height() for s in rendered) + line_gap * (len(rendered) - 1) + padding * 2
    panel = pygame.Surface((width, height), pygame.SRCALPHA)
    pygame.draw.rect(panel, render_cfg.hud_shadow_color, panel.get_rect(), border_radius=8)
    y = padding
    for text_surface in rendered:
        panel.blit(text_surface, (padding, y))
        y += text_surface.get_height() + line_gap
    surface.blit(panel, topleft)


__all__ = [
    "Color",
    "downsample_points",
    "draw_body",
    "draw_orbit_line",
    "draw_rocket",
    "draw_starfield",
    "draw_text_panel",
    "generate_starfield",
    "get_text_surface",
    "hex_to_rgb",
    "load_font",
]
