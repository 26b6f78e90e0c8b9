# config.py
# Tuneable constants for the game. Build a GameConfig and hand it to the
# session, the budget game and the server instead of reading these directly.

from dataclasses import dataclass, field
from typing import Dict, Optional

OSRM_URL = "https://router.project-osrm.org"
OSRM_PROFILE = "driving"
OSRM_TIMEOUT_S = 10.0

BASELINE_SCORE = 1000

# route mode: one route point per step
ROUTE_STEP_INTERVAL_S = 0.05
# fraction mode: straight line, ~60 fps
FRAME_INTERVAL_S = 0.016
FRACTION_STEP = 0.01

# budget variant
BUDGET_TOTAL_DISTANCE = 1000
BUDGET_START_MONEY = 100
BUDGET_MOVE_INTERVAL_S = 1.0
BUDGET_CHALLENGE_INTERVAL_S = 5.0
BUDGET_CHALLENGE_CHANCE = 0.1
BUDGET_CHALLENGE_DURATION_S = 5.0

SERVER_HOST = "127.0.0.1"
SERVER_PORT = 8000


@dataclass
class GameConfig:
    # Routing
    osrm_url: str = OSRM_URL
    osrm_profile: str = OSRM_PROFILE
    osrm_timeout_s: float = OSRM_TIMEOUT_S

    # Scoring
    baseline_score: int = BASELINE_SCORE
    speeds_kmh: Dict[str, float] = field(default_factory=dict)  # per-mode override

    # Animation
    route_step_interval_s: float = ROUTE_STEP_INTERVAL_S
    frame_interval_s: float = FRAME_INTERVAL_S
    fraction_step: float = FRACTION_STEP

    # Budget variant
    budget_total_distance: int = BUDGET_TOTAL_DISTANCE
    budget_start_money: int = BUDGET_START_MONEY
    budget_move_interval_s: float = BUDGET_MOVE_INTERVAL_S
    budget_challenge_interval_s: float = BUDGET_CHALLENGE_INTERVAL_S
    budget_challenge_chance: float = BUDGET_CHALLENGE_CHANCE
    budget_challenge_duration_s: float = BUDGET_CHALLENGE_DURATION_S

    def speed_for(self, transport_id: str, default: float) -> float:
        speed: Optional[float] = self.speeds_kmh.get(transport_id)
        if speed is None:
            return default
        if speed <= 0:
            raise ValueError(f"speed for {transport_id!r} must be > 0, got {speed}")
        return speed
