from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional

from TransportOption import TransportOption
from Challenge import Challenge
from catalog import Catalog, DEFAULT_CATALOG
from config import GameConfig
from scheduler import Scheduler, TaskHandle

logger = logging.getLogger(__name__)

ARRIVAL_BONUS_BASE = 1000
ARRIVAL_BONUS_RATE = 0.1


class Outcome(Enum):
    ARRIVED = auto()
    OUT_OF_BUDGET = auto()


@dataclass
class BudgetState:
    total_distance: int
    money: int
    score: int = 0
    current_distance: float = 0.0
    carbon_footprint: float = 0.0
    time: int = 0
    selected_vehicle: Optional[TransportOption] = None
    active_challenge: Optional[Challenge] = None
    outcome: Optional[Outcome] = None

    @property
    def game_over(self) -> bool:
        return self.outcome is not None


class BudgetGame:
    """
    Resource-management variant: one fixed trip, a budget, and random
    challenges that cost time and money.

    Each vehicle pick is paid for and adds its CO2. The chosen vehicle then
    moves `speed_kmh` distance units per move tick. Reaching the end awards
    floor((1000 - carbon) * 0.1) points. A challenge that would drain the
    budget to zero or below ends the game.
    """

    def __init__(self,
                 scheduler: Scheduler,
                 catalog: Catalog = DEFAULT_CATALOG,
                 config: Optional[GameConfig] = None,
                 rng: Optional[random.Random] = None) -> None:
        self.config = config or GameConfig()
        self.catalog = catalog
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.state = self._initial_state()
        self.started = False
        self._move: Optional[TaskHandle] = None
        self._challenges: Optional[TaskHandle] = None
        self._challenge_clear: Optional[TaskHandle] = None

    def _initial_state(self) -> BudgetState:
        return BudgetState(
            total_distance=self.config.budget_total_distance,
            money=self.config.budget_start_money,
        )

    # -------------------------
    # control
    # -------------------------
    def start(self) -> None:
        if self.started:
            return
        self.started = True
        self._start_challenges()

    def stop(self) -> None:
        for handle in (self._move, self._challenges, self._challenge_clear):
            if handle is not None:
                handle.cancel()
        self._move = None
        self._challenges = None
        self._challenge_clear = None

    def reset(self) -> None:
        self.stop()
        self.state = self._initial_state()
        if self.started:
            self._start_challenges()

    def _start_challenges(self) -> None:
        self._challenges = self.scheduler.call_every(
            self.config.budget_challenge_interval_s, self._challenge_tick)

    def can_afford(self, vehicle_id: str) -> bool:
        vehicle = self.catalog.transport(vehicle_id)
        return not self.state.game_over and self.state.money >= vehicle.cost

    def select_vehicle(self, vehicle_id: str) -> bool:
        vehicle = self.catalog.transport(vehicle_id)
        st = self.state
        if st.game_over or st.money < vehicle.cost:
            logger.info("Vehicle %s refused (money %s, cost %s)", vehicle_id, st.money, vehicle.cost)
            return False

        st.money -= vehicle.cost
        st.carbon_footprint += vehicle.co2_g_per_km
        st.selected_vehicle = vehicle

        if self._move is not None:
            self._move.cancel()
        self._move = self.scheduler.call_every(self.config.budget_move_interval_s, self._move_tick)
        return True

    # -------------------------
    # timers
    # -------------------------
    def _move_tick(self) -> bool:
        st = self.state
        if st.game_over or st.selected_vehicle is None:
            return True

        new_distance = st.current_distance + st.selected_vehicle.speed_kmh
        if new_distance >= st.total_distance:
            st.current_distance = st.total_distance
            st.score += math.floor((ARRIVAL_BONUS_BASE - st.carbon_footprint) * ARRIVAL_BONUS_RATE)
            self._end(Outcome.ARRIVED)
            return True

        st.current_distance = new_distance
        st.time += 1
        return False

    def _challenge_tick(self) -> bool:
        st = self.state
        if st.game_over:
            return True
        if st.active_challenge is not None or not self.catalog.challenges:
            return False
        if self.rng.random() >= self.config.budget_challenge_chance:
            return False

        challenge = self.rng.choice(self.catalog.challenges)
        new_money = st.money - challenge.cost_impact
        if new_money <= 0:
            logger.info("Challenge %s drained the budget", challenge.id)
            self._end(Outcome.OUT_OF_BUDGET)
            return True

        st.active_challenge = challenge
        st.time += challenge.time_impact
        st.money = new_money
        logger.info("Challenge %s: +%s time, -%s money", challenge.id, challenge.time_impact, challenge.cost_impact)
        self._challenge_clear = self.scheduler.call_later(
            self.config.budget_challenge_duration_s, self._clear_challenge)
        return False

    def _clear_challenge(self) -> None:
        self.state.active_challenge = None
        self._challenge_clear = None

    def _end(self, outcome: Outcome) -> None:
        self.state.outcome = outcome
        logger.info("Budget game over: %s, score %s", outcome.name, self.state.score)
        # the calling timer stops itself by returning True
        for handle in (self._move, self._challenges, self._challenge_clear):
            if handle is not None:
                handle.cancel()

    def snapshot(self) -> Dict[str, Any]:
        st = self.state
        return {
            "score": st.score,
            "current_distance": st.current_distance,
            "total_distance": st.total_distance,
            "carbon_footprint": st.carbon_footprint,
            "time": st.time,
            "money": st.money,
            "selected_vehicle": None if st.selected_vehicle is None else st.selected_vehicle.id,
            "active_challenge": None if st.active_challenge is None else {
                "id": st.active_challenge.id,
                "title": st.active_challenge.title,
                "description": st.active_challenge.description,
            },
            "game_over": st.game_over,
            "outcome": None if st.outcome is None else st.outcome.name,
        }
