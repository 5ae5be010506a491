"""Travel progress state read by the scene every frame."""
from __future__ import annotations

from dataclasses import dataclass, replace


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class TravelProgress:
    """Where a traveller is on its journey between two bodies.

    ``previous_distance_traveled`` is the distance already shown on screen;
    when it differs from ``distance_traveled`` there is a pending delta that
    the scene animates before marking the progress synced.
    """

    starting_location: str
    target: str | None = None
    initial_distance: float | None = None
    distance_traveled: float | None = None
    previous_distance_traveled: float | None = None

    @property
    def travelling(self) -> bool:
        return (
            self.target is not None
            and self.initial_distance is not None
            and self.initial_distance > 0.0
        )

    @property
    def has_pending_delta(self) -> bool:
        return (
            self.distance_traveled is not None
            and self.distance_traveled != self.previous_distance_traveled
        )

    @property
    def _denominator(self) -> float:
        if self.initial_distance and self.initial_distance > 0.0:
            return self.initial_distance
        return 1.0

    @property
    def from_fraction(self) -> float:
        return _clamp01((self.previous_distance_traveled or 0.0) / self._denominator)

    @property
    def to_fraction(self) -> float:
        return _clamp01((self.distance_traveled or 0.0) / self._denominator)

    @property
    def at_start(self) -> bool:
        return (self.distance_traveled or 0.0) <= 1e-9

    @property
    def arrived(self) -> bool:
        return self.travelling and self.to_fraction >= 1.0

    @property
    def travel_key(self) -> str:
        return f"{self.starting_location}|{self.target or ''}"

    def fraction_at(self, ease: float) -> float:
        """Path fraction with the pending delta eased in by ``ease``."""

        if not self.travelling:
            return 0.0
        start = self.previous_distance_traveled
        if start is None:
            start = self.distance_traveled or 0.0
        end = self.distance_traveled or 0.0
        traveled = min(self.initial_distance, start + (end - start) * ease)
        return _clamp01(traveled / self.initial_distance)

    def advance(self, distance: float) -> TravelProgress:
        """Record ``distance`` more travelled; the old value becomes the previous one."""

        if distance < 0.0:
            raise ValueError("distance must be non-negative")
        current = self.distance_traveled or 0.0
        return replace(
            self,
            previous_distance_traveled=current,
            distance_traveled=current + distance,
        )

    def synced(self) -> TravelProgress:
        return replace(self, previous_distance_traveled=self.distance_traveled)

    def landed(self) -> TravelProgress:
        """Progress after arrival: the target becomes the new starting location."""

        if not self.arrived or self.target is None:
            return self
        return TravelProgress(starting_location=self.target)

    def depart(self, target: str, initial_distance: float) -> TravelProgress:
        if initial_distance <= 0.0:
            raise ValueError("initial_distance must be positive")
        return TravelProgress(
            starting_location=self.starting_location,
            target=target,
            initial_distance=initial_distance,
            distance_traveled=0.0,
            previous_distance_traveled=0.0,
        )


@dataclass(frozen=True)
class Traveler:
    """Another user whose rocket is drawn alongside the local traveller."""

    uid: str
    progress: TravelProgress
    name: str = ""


__all__ = ["TravelProgress", "Traveler"]
