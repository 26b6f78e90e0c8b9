import pytest

from BudgetGame import BudgetGame, Outcome
from config import GameConfig
from errors import UnknownTransport
from scheduler import VirtualClock


class StubRandom:
    """random() pops the queued rolls (then 1.0, i.e. never); choice() picks a fixed index."""

    def __init__(self, rolls=(), pick=0):
        self.rolls = list(rolls)
        self.pick = pick

    def random(self):
        return self.rolls.pop(0) if self.rolls else 1.0

    def choice(self, seq):
        return seq[self.pick]


def make_game(rolls=(), pick=0, **config):
    clock = VirtualClock()
    game = BudgetGame(clock, config=GameConfig(**config), rng=StubRandom(rolls, pick))
    return clock, game


def test_initial_state():
    _, game = make_game()
    snap = game.snapshot()
    assert snap["money"] == 100
    assert snap["total_distance"] == 1000
    assert snap["score"] == 0
    assert snap["selected_vehicle"] is None
    assert not snap["game_over"]


def test_bike_reaches_destination():
    clock, game = make_game()
    assert game.select_vehicle("bike")
    assert game.state.money == 100

    fired = clock.run_until_idle()
    st = game.state
    assert fired == 67
    assert st.current_distance == 1000
    assert st.time == 66
    assert st.score == 100
    assert st.outcome is Outcome.ARRIVED


def test_car_costs_money_and_score():
    clock, game = make_game()
    assert game.select_vehicle("car")
    assert game.state.money == 92
    assert game.state.carbon_footprint == 120

    clock.run_until_idle()
    assert game.state.score == 88
    assert game.state.outcome is Outcome.ARRIVED
    assert not game.select_vehicle("bike")


def test_switching_vehicle_pays_again_and_keeps_one_timer():
    clock, game = make_game()
    game.select_vehicle("car")
    clock.advance(2.0)
    assert game.state.current_distance == 90

    game.select_vehicle("bus")
    assert game.state.money == 90
    assert game.state.carbon_footprint == 150
    assert game.state.selected_vehicle.id == "bus"
    assert clock.active_timers == 1

    clock.advance(1.0)
    assert game.state.current_distance == 115


def test_unaffordable_vehicle_is_refused():
    _, game = make_game(budget_start_money=4)
    assert not game.can_afford("train")
    assert not game.select_vehicle("train")
    assert game.state.money == 4
    assert game.state.selected_vehicle is None

    assert game.select_vehicle("bus")
    assert game.state.money == 2


def test_unknown_vehicle():
    _, game = make_game()
    with pytest.raises(UnknownTransport):
        game.select_vehicle("plane")


def test_challenge_costs_time_and_money_then_clears():
    # pick=2 -> strike: +20 time, 5 money
    clock, game = make_game(rolls=[0.05], pick=2)
    game.start()

    clock.advance(5.0)
    st = game.state
    assert st.active_challenge.id == "strike"
    assert st.money == 95
    assert st.time == 20

    clock.advance(5.0)
    assert game.state.active_challenge is None
    assert game.state.money == 95


def test_no_challenge_when_roll_misses():
    clock, game = make_game(rolls=[0.5, 0.9])
    game.start()
    clock.advance(10.0)
    assert game.state.active_challenge is None
    assert game.state.money == 100


def test_challenge_draining_budget_ends_game():
    clock, game = make_game(rolls=[0.0], pick=2, budget_start_money=5)
    game.start()
    game.select_vehicle("bike")

    clock.advance(5.0)
    st = game.state
    assert st.outcome is Outcome.OUT_OF_BUDGET
    assert st.money == 5
    assert st.active_challenge is None
    assert clock.active_timers == 0
    assert not game.select_vehicle("bike")


def test_reset_restores_initial_state():
    clock, game = make_game()
    game.start()
    game.select_vehicle("car")
    clock.advance(3.0)

    game.reset()
    snap = game.snapshot()
    assert snap["money"] == 100
    assert snap["current_distance"] == 0
    assert snap["selected_vehicle"] is None
    assert snap["outcome"] is None
    # challenge timer is back, movement timer is gone
    assert clock.active_timers == 1
