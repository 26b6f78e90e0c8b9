import math
from dataclasses import dataclass
from typing import List, Tuple

LatLon = Tuple[float, float]  # (lat, lon)

SOURCE_OSRM = "osrm"
SOURCE_STRAIGHT = "straight"


def haversine_m(a: LatLon, b: LatLon) -> float:
    R = 6371000.0
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    x = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * R * math.asin(math.sqrt(x))


@dataclass(frozen=True)
class Route:
    """
    Ordered path from a level's start to its end.
    points: (lat, lon) pairs, at least two
    source: "osrm" when it came from the routing service, "straight" for the fallback line
    """
    points: List[LatLon]
    source: str = SOURCE_OSRM

    def __post_init__(self):
        if len(self.points) < 2:
            raise ValueError("route needs at least two points")

    @classmethod
    def straight(cls, start: LatLon, end: LatLon) -> "Route":
        return cls(points=[tuple(start), tuple(end)], source=SOURCE_STRAIGHT)

    @property
    def start(self) -> LatLon:
        return self.points[0]

    @property
    def end(self) -> LatLon:
        return self.points[-1]

    @property
    def is_straight(self) -> bool:
        return self.source == SOURCE_STRAIGHT

    @property
    def length_m(self) -> float:
        return sum(haversine_m(a, b) for a, b in zip(self.points, self.points[1:]))

    def position_at_fraction(self, fraction: float) -> LatLon:
        # straight interpolation between the two ends, exact at 0 and 1
        if fraction <= 0.0:
            return self.start
        if fraction >= 1.0:
            return self.end
        lat1, lon1 = self.start
        lat2, lon2 = self.end
        return (lat1 + fraction * (lat2 - lat1), lon1 + fraction * (lon2 - lon1))
