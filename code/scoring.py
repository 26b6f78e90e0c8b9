import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from TransportOption import TransportOption
from Level import Level
from catalog import Catalog


class Verdict(Enum):
    GOOD = "good"
    POOR = "poor"


@dataclass(frozen=True)
class SelectionResult:
    transport_id: str
    level_id: int
    points: int
    verdict: Verdict
    co2_grams: float
    travel_minutes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transport_id": self.transport_id,
            "level_id": self.level_id,
            "points": self.points,
            "verdict": self.verdict.value,
            "co2_grams": self.co2_grams,
            "travel_minutes": self.travel_minutes,
        }


def score(transport: TransportOption) -> int:
    return transport.points


def verdict(level: Level, transport_id: str, catalog: Catalog) -> Verdict:
    """
    GOOD when the level recommends this transport. Levels without a
    recommendation accept any of the catalog's eco-friendly options.
    """
    catalog.transport(transport_id)
    if level.recommended_transport is not None:
        good = transport_id == level.recommended_transport
    else:
        good = transport_id in catalog.eco_transports
    return Verdict.GOOD if good else Verdict.POOR


def travel_time_minutes(distance_km: float, speed_kmh: float) -> int:
    if speed_kmh <= 0:
        raise ValueError("speed_kmh must be > 0")
    return math.ceil(distance_km / speed_kmh * 60)


def trip_co2_grams(distance_km: float, transport: TransportOption) -> float:
    return transport.co2_g_per_km * distance_km


def evaluate(level: Level,
             transport: TransportOption,
             catalog: Catalog,
             speed_kmh: Optional[float] = None) -> SelectionResult:
    speed = transport.speed_kmh if speed_kmh is None else speed_kmh
    return SelectionResult(
        transport_id=transport.id,
        level_id=level.id,
        points=score(transport),
        verdict=verdict(level, transport.id, catalog),
        co2_grams=trip_co2_grams(level.distance_km, transport),
        travel_minutes=travel_time_minutes(level.distance_km, speed),
    )
