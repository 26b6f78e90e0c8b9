import logging
from typing import List, Tuple

import polyline
import requests

from Route import Route, SOURCE_OSRM
from errors import RouteUnavailable
from config import OSRM_URL, OSRM_PROFILE, OSRM_TIMEOUT_S

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]

PROFILES = ("driving", "cycling", "walking")


def route_url(start: LatLon, dest: LatLon, profile: str = OSRM_PROFILE, base_url: str = OSRM_URL) -> str:
    if profile not in PROFILES:
        raise ValueError(f"Unknown profile: {profile}")

    a_lat, a_lon = start
    b_lat, b_lon = dest
    coords = f"{a_lon},{a_lat};{b_lon},{b_lat}"
    return f"{base_url.rstrip('/')}/route/v1/{profile}/{coords}?overview=full&geometries=geojson"


def _geometry_latlon(geometry) -> List[LatLon]:
    # encoded polyline is already (lat, lon); geojson comes as [lon, lat]
    if isinstance(geometry, str):
        return [(lat, lon) for lat, lon in polyline.decode(geometry)]
    return [(lat, lon) for lon, lat in geometry["coordinates"]]


def fetch_route(start: LatLon,
                dest: LatLon,
                profile: str = OSRM_PROFILE,
                base_url: str = OSRM_URL,
                timeout: float = OSRM_TIMEOUT_S) -> List[LatLon]:
    """
    Ask the OSRM service for a path from start to dest.

    Returns the route geometry as (lat, lon) pairs. Raises RouteUnavailable
    on any HTTP, network or payload problem.
    """
    url = route_url(start, dest, profile, base_url)
    logger.debug("GET %s", url)

    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise RouteUnavailable(f"routing request failed: {e}") from e

    if not isinstance(data, dict):
        raise RouteUnavailable("routing service answered with a non-object body")
    if data.get("code", "Ok") != "Ok":
        raise RouteUnavailable(f"routing service answered {data.get('code')}: {data.get('message')}")

    routes = data.get("routes") or []
    if not routes:
        raise RouteUnavailable("routing service returned no route")

    try:
        geometry_latlon = _geometry_latlon(routes[0]["geometry"])
    except (KeyError, TypeError, ValueError) as e:
        raise RouteUnavailable(f"unreadable route geometry: {e}") from e

    if not geometry_latlon:
        raise RouteUnavailable("route geometry is empty")
    return geometry_latlon


def route_or_straight_line(start: LatLon,
                           dest: LatLon,
                           profile: str = OSRM_PROFILE,
                           base_url: str = OSRM_URL,
                           timeout: float = OSRM_TIMEOUT_S) -> Route:
    """Fetched route, or the two-point line [start, dest] when none is usable."""
    try:
        points = fetch_route(start, dest, profile, base_url, timeout)
    except RouteUnavailable as e:
        logger.warning("No route %s -> %s, using straight line (%s)", start, dest, e)
        return Route.straight(start, dest)

    if len(points) < 2:
        logger.warning("Single-point route %s -> %s, using straight line", start, dest)
        return Route.straight(start, dest)
    return Route(points=points, source=SOURCE_OSRM)
