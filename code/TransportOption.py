from dataclasses import dataclass


@dataclass(frozen=True)
class TransportOption:
    """
    A selectable mode of travel.
    co2_g_per_km: emissions per passenger km
    speed_kmh: average speed, also the per-tick advance in the budget game
    cost: ticket price in the budget game
    points: eco-score delta awarded when picked for a level
    """
    id: str
    name: str
    co2_g_per_km: float
    speed_kmh: float
    cost: int
    points: int
