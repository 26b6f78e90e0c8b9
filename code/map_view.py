import folium

from TripSession import TripSession


def build_map(session: TripSession, zoom_start: int = 13) -> folium.Map:
    level = session.level
    center = (
        (level.start[0] + level.end[0]) / 2,
        (level.start[1] + level.end[1]) / 2,
    )
    m = folium.Map(location=center, zoom_start=zoom_start)

    folium.Marker(level.start, tooltip=level.start_name, icon=folium.Icon(color="green")).add_to(m)
    folium.Marker(level.end, tooltip=level.end_name, icon=folium.Icon(color="red")).add_to(m)

    route = session.route
    if route is not None:
        style = {"color": "blue", "weight": 5, "opacity": 0.8}
        if route.is_straight:
            style["dash_array"] = "6"
        folium.PolyLine(route.points, tooltip=f"{level.name} ({route.source})", **style).add_to(m)

    folium.CircleMarker(
        session.position,
        radius=7,
        color="orange",
        fill=True,
        tooltip=session.selected_transport or "start",
    ).add_to(m)
    return m


def render_map(session: TripSession) -> str:
    return build_map(session).get_root().render()
