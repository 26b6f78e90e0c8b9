import pytest

from Route import Route, haversine_m
from TripProgress import TripProgress

START = (48.8584, 2.2945)
END = (48.8866, 2.3432)


def test_straight_route_is_start_end():
    r = Route.straight(START, END)
    assert r.points == [START, END]
    assert r.is_straight
    assert r.position_at_fraction(0.0) == START
    assert r.position_at_fraction(1.0) == END
    assert r.position_at_fraction(2.0) == END
    lat, lon = r.position_at_fraction(0.5)
    assert lat == pytest.approx((START[0] + END[0]) / 2)
    assert lon == pytest.approx((START[1] + END[1]) / 2)


def test_route_needs_two_points():
    with pytest.raises(ValueError):
        Route(points=[START])


def test_route_length():
    r = Route(points=[START, (48.87, 2.32), END])
    assert r.length_m == pytest.approx(haversine_m(START, (48.87, 2.32)) + haversine_m((48.87, 2.32), END))
    assert 4000 < Route.straight(START, END).length_m < 5000


def test_fraction_mode_clamps_and_lands_on_end():
    p = TripProgress(route=Route.straight(START, END), origin=START, fraction_step=0.3)
    assert p.by_fraction
    assert p.get_pos() == START

    seen = []
    while not p.step():
        seen.append(p.fraction)
        assert p.fraction <= 1.0
    assert seen == pytest.approx([0.3, 0.6, 0.9])
    assert p.fraction == 1.0
    assert p.get_pos() == END


def test_route_mode_walks_points():
    mid = (48.87, 2.32)
    p = TripProgress(route=Route(points=[START, mid, END]), origin=START)
    assert not p.by_fraction

    assert p.step() is False
    assert p.get_pos() == mid
    assert p.step() is True
    assert p.get_pos() == END


def test_no_mutation_after_done():
    p = TripProgress(route=Route.straight(START, END), origin=START, fraction_step=0.5)
    while not p.step():
        pass
    frames = p.frames
    assert p.step() is True
    assert p.frames == frames
    assert p.get_pos() == END


def test_bad_fraction_step():
    with pytest.raises(ValueError):
        TripProgress(route=Route.straight(START, END), origin=START, fraction_step=0.0)
