from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from Route import Route

LatLon = Tuple[float, float]


@dataclass
class TripProgress:
    """
    Advancement cursor of one animated trip.

    Route mode (route from the routing service): idx walks the route points,
    one per step. Fraction mode (straight line): fraction grows by
    fraction_step per frame and the position is interpolated.
    Both modes start on `origin` and finish exactly on route.end.
    """
    route: Route
    origin: LatLon
    fraction_step: float = 0.01
    idx: int = 0
    frames: int = 0
    fraction: float = 0.0
    pos: Optional[LatLon] = None
    done: bool = False

    def __post_init__(self):
        if self.fraction_step <= 0.0:
            raise ValueError("fraction_step must be > 0")
        if self.pos is None:
            self.pos = self.origin

    @property
    def by_fraction(self) -> bool:
        return self.route.is_straight

    def step(self) -> bool:
        if self.done:
            return True

        if self.by_fraction:
            self.frames += 1
            self.fraction = min(1.0, self.frames * self.fraction_step)
            # float drift on the last frame
            if self.fraction >= 1.0 - 1e-9:
                self.fraction = 1.0
            self.pos = self.route.position_at_fraction(self.fraction)
            self.done = self.fraction >= 1.0
        else:
            last = len(self.route.points) - 1
            self.idx = min(self.idx + 1, last)
            self.pos = self.route.points[self.idx]
            self.done = self.idx >= last

        if self.done:
            self.pos = self.route.end
        return self.done

    def get_pos(self) -> LatLon:
        return self.pos
