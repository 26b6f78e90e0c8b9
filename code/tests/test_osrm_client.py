import polyline
import pytest
import requests

import osrm_client
from errors import RouteUnavailable
from osrm_client import fetch_route, route_or_straight_line, route_url

START = (48.8584, 2.2945)
END = (48.8866, 2.3432)


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


def fake_get(monkeypatch, response=None, exc=None):
    calls = []

    def _get(url, timeout=None):
        calls.append(url)
        if exc is not None:
            raise exc
        return response

    monkeypatch.setattr(osrm_client.requests, "get", _get)
    return calls


def test_url_uses_lng_lat_order():
    url = route_url(START, END, "driving", "http://localhost:5000/")
    assert url.startswith("http://localhost:5000/route/v1/driving/2.2945,48.8584;2.3432,48.8866")
    assert "geometries=geojson" in url


def test_unknown_profile():
    with pytest.raises(ValueError):
        route_url(START, END, "flying")


def test_http_500_falls_back_to_straight_line(monkeypatch):
    fake_get(monkeypatch, FakeResponse(500, {"code": "Error"}))
    with pytest.raises(RouteUnavailable):
        fetch_route(START, END)

    route = route_or_straight_line(START, END)
    assert route.points == [START, END]
    assert route.is_straight


def test_network_error_falls_back(monkeypatch):
    fake_get(monkeypatch, exc=requests.ConnectionError("no network"))
    assert route_or_straight_line(START, END).points == [START, END]


def test_timeout_falls_back(monkeypatch):
    fake_get(monkeypatch, exc=requests.Timeout("slow"))
    assert route_or_straight_line(START, END).is_straight


def test_empty_routes_fall_back(monkeypatch):
    fake_get(monkeypatch, FakeResponse(200, {"code": "Ok", "routes": []}))
    assert route_or_straight_line(START, END).points == [START, END]


def test_no_route_code_falls_back(monkeypatch):
    fake_get(monkeypatch, FakeResponse(200, {"code": "NoRoute", "message": "Impossible route"}))
    assert route_or_straight_line(START, END).is_straight


def test_invalid_json_falls_back(monkeypatch):
    fake_get(monkeypatch, FakeResponse(200, None))
    assert route_or_straight_line(START, END).is_straight


def test_geojson_coordinates_are_swapped(monkeypatch):
    payload = {
        "code": "Ok",
        "routes": [{
            "geometry": {
                "type": "LineString",
                "coordinates": [[2.2945, 48.8584], [2.31, 48.87], [2.3432, 48.8866]],
            },
            "distance": 6100.0,
            "duration": 720.0,
        }],
    }
    calls = fake_get(monkeypatch, FakeResponse(200, payload))

    route = route_or_straight_line(START, END, base_url="http://osrm.test")
    assert route.source == "osrm"
    assert route.points == [(48.8584, 2.2945), (48.87, 2.31), (48.8866, 2.3432)]
    assert calls == [route_url(START, END, "driving", "http://osrm.test")]


def test_encoded_polyline_geometry(monkeypatch):
    encoded = polyline.encode([START, (48.87, 2.31), END])
    fake_get(monkeypatch, FakeResponse(200, {"code": "Ok", "routes": [{"geometry": encoded}]}))

    points = fetch_route(START, END)
    assert len(points) == 3
    assert points[0] == pytest.approx(START)
    assert points[-1] == pytest.approx(END)
