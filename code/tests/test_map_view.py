from Route import Route
from TripSession import TripSession
from map_view import build_map, render_map
from scheduler import VirtualClock


def make_session():
    clock = VirtualClock()
    session = TripSession(clock, router=lambda a, b: Route(points=[a, (48.87, 2.32), b]))
    return clock, session


def test_render_before_route_is_known():
    _, session = make_session()
    html = render_map(session)
    assert "Tour Eiffel" in html
    assert "L.polyline" not in html


def test_render_with_route_and_moving_marker():
    clock, session = make_session()
    clock.run_pending()
    session.select_transport("bike")
    clock.advance(1.0)

    m = build_map(session)
    html = m.get_root().render()
    assert "L.polyline" in html
    assert "L.circleMarker" in html
    assert "bike" in html
