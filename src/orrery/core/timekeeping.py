"""Time sources and frame pacing for the orrery."""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

MS_PER_DAY = 86_400_000.0
UNIX_EPOCH_JD = 2_440_587.5

Instant = datetime | float


def _system_ms() -> float:
    return time.time() * 1000.0


def epoch_millis(when: Instant) -> float:
    """Milliseconds since the Unix epoch; naive datetimes are read as UTC."""

    if isinstance(when, datetime):
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return when.timestamp() * 1000.0
    return float(when)


def quantize_to_second(epoch_ms: float) -> float:
    """Round an instant to the nearest whole second, halves rounding up."""

    return math.floor(epoch_ms / 1000.0 + 0.5) * 1000.0


def julian_day(epoch_ms: float) -> float:
    return epoch_ms / MS_PER_DAY + UNIX_EPOCH_JD


def from_epoch_millis(epoch_ms: float) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)


@dataclass
class Clock:
    """Current-time source with a debug offset for fast-forwarding.

    Everything that needs "now" (orbital positions, travel and camera
    animations) reads it from here instead of the system clock, so a time
    offset moves the whole scene consistently.
    """

    offset_ms: float = 0.0
    source: Callable[[], float] = _system_ms

    def now_ms(self) -> float:
        return self.source() + self.offset_ms

    def now(self) -> datetime:
        return from_epoch_millis(self.now_ms())

    def advance(self, milliseconds: float) -> None:
        self.offset_ms += milliseconds

    def reset_offset(self) -> None:
        self.offset_ms = 0.0


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`."""

    last_time: float = field(default_factory=time.perf_counter)

    def tick(self) -> float:
        now = time.perf_counter()
        dt = now - self.last_time
        self.last_time = now
        return dt


@dataclass
class FrameLimiter:
    """Skips frames that arrive faster than ``max_fps``."""

    max_fps: float
    last_ms: float = 0.0

    def __post_init__(self) -> None:
        if self.max_fps <= 0.0:
            raise ValueError("max_fps must be positive")

    @property
    def min_frame_ms(self) -> float:
        return 1000.0 / self.max_fps

    def ready(self, now_ms: float) -> bool:
        if self.last_ms > 0.0 and now_ms - self.last_ms < self.min_frame_ms:
            return False
        self.last_ms = now_ms
        return True

    def reset(self) -> None:
        self.last_ms = 0.0


__all__ = [
    "Clock",
    "FrameLimiter",
    "FrameTimer",
    "Instant",
    "MS_PER_DAY",
    "epoch_millis",
    "from_epoch_millis",
    "julian_day",
    "quantize_to_second",
]
