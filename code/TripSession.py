from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from Level import Level
from Route import Route
from TripProgress import TripProgress
from catalog import Catalog, DEFAULT_CATALOG
from config import GameConfig
from errors import RouteUnavailable
from osrm_client import route_or_straight_line
from scheduler import Scheduler, TaskHandle
from scoring import SelectionResult, Verdict, evaluate, verdict

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]
Router = Callable[[LatLon, LatLon], Route]
Listener = Callable[[Dict[str, Any]], None]


@dataclass
class TripState:
    level: Level
    pos: LatLon
    eco_score: int
    selected: Optional[str] = None
    result_visible: bool = False
    last_result: Optional[SelectionResult] = None
    progress: Optional[TripProgress] = None
    route: Optional[Route] = None
    completed: Set[int] = field(default_factory=set)


class TripSession:
    """
    Owns one player's trip: active level, transport choice, eco-score and the
    animation that moves the displayed position from start to end.

    Timers and the route lookup go through `scheduler`, so the same session
    runs on asyncio (AsyncioScheduler) or on a hand-driven VirtualClock.

    Usage:
        session = TripSession(AsyncioScheduler())
        session.select_transport("bike")
        ...
        session.next_level()
    """

    def __init__(self,
                 scheduler: Scheduler,
                 catalog: Catalog = DEFAULT_CATALOG,
                 config: Optional[GameConfig] = None,
                 router: Optional[Router] = None,
                 level: Optional[Level] = None) -> None:
        self.config = config or GameConfig()
        self.catalog = catalog
        self.scheduler = scheduler
        self._router: Router = router or partial(
            route_or_straight_line,
            profile=self.config.osrm_profile,
            base_url=self.config.osrm_url,
            timeout=self.config.osrm_timeout_s,
        )
        self._animation: Optional[TaskHandle] = None
        self._load_token = 0
        self._listeners: List[Listener] = []

        first = level or catalog.level_at(0)
        self.state = TripState(level=first, pos=first.start, eco_score=self.config.baseline_score)
        self.load_level(first)

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def level(self) -> Level:
        return self.state.level

    @property
    def position(self) -> LatLon:
        return self.state.pos

    @property
    def selected_transport(self) -> Optional[str]:
        return self.state.selected

    @property
    def result_visible(self) -> bool:
        return self.state.result_visible

    @property
    def eco_score(self) -> int:
        return self.state.eco_score

    @property
    def completed_levels(self) -> FrozenSet[int]:
        return frozenset(self.state.completed)

    @property
    def route(self) -> Optional[Route]:
        return self.state.route

    @property
    def animating(self) -> bool:
        if self._animation is None or self._animation.done:
            return False
        return not self.finished

    @property
    def finished(self) -> bool:
        return self.state.progress is not None and self.state.progress.done

    # ------------------------------------------------------------------
    # Level control
    # ------------------------------------------------------------------

    def load_level(self, level: Level) -> None:
        self.catalog.index_of(level)
        self.cancel_animation()

        st = self.state
        st.level = level
        st.selected = None
        st.result_visible = False
        st.last_result = None
        st.progress = None
        st.route = None
        st.pos = level.start

        # results of earlier loads are dropped when they arrive
        self._load_token += 1
        token = self._load_token
        self.scheduler.submit(
            partial(self._lookup_route, level),
            partial(self._apply_route, token, level.id),
        )
        logger.info("Level %s loaded: %s -> %s", level.id, level.start_name, level.end_name)
        self._notify()

    def load_level_id(self, level_id: int) -> None:
        self.load_level(self.catalog.level(level_id))

    def next_level(self) -> Level:
        nxt = self.catalog.next_level(self.state.level)
        self.load_level(nxt)
        self.restart()
        return nxt

    def restart(self) -> None:
        self.cancel_animation()
        st = self.state
        st.selected = None
        st.result_visible = False
        st.last_result = None
        st.progress = None
        st.pos = st.level.start
        self._notify()

    # ------------------------------------------------------------------
    # Transport choice
    # ------------------------------------------------------------------

    def select_transport(self, transport_id: str) -> SelectionResult:
        """
        Pick a transport for the active level.

        Picking the transport that is already shown is a no-op and returns
        the stored result. Any other pick restarts the trip from the level
        start and adds the transport's points once.

        Raises:
            UnknownTransport: id not in the catalog; state is left untouched.
        """
        transport = self.catalog.transport(transport_id)
        st = self.state

        if st.selected == transport_id and st.result_visible:
            logger.debug("Transport %s already selected, ignoring", transport_id)
            return st.last_result

        speed = self.config.speed_for(transport_id, transport.speed_kmh)
        result = evaluate(st.level, transport, self.catalog, speed_kmh=speed)

        self.cancel_animation()
        st.pos = st.level.start
        st.selected = transport_id
        st.result_visible = True
        st.last_result = result
        st.eco_score += result.points
        st.completed.add(st.level.id)
        logger.info("Level %s: %s selected (%+d, %s), score %d",
                    st.level.id, transport_id, result.points, result.verdict.value, st.eco_score)

        self._start_animation()
        self._notify()
        return result

    def verdict(self, transport_id: str) -> Verdict:
        return verdict(self.state.level, transport_id, self.catalog)

    # ------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------

    def _start_animation(self) -> None:
        st = self.state
        route = st.route or Route.straight(st.level.start, st.level.end)
        progress = TripProgress(route=route, origin=st.level.start, fraction_step=self.config.fraction_step)
        st.progress = progress

        if progress.by_fraction:
            interval = self.config.frame_interval_s
        else:
            interval = self.config.route_step_interval_s
        self._animation = self.scheduler.call_every(interval, partial(self._advance, progress))

    def _advance(self, progress: TripProgress) -> bool:
        # a superseded loop stops on its next fire
        if progress is not self.state.progress:
            return True
        if progress.done:
            return True

        finished = progress.step()
        self.state.pos = progress.get_pos()
        if finished:
            logger.debug("Level %s: trip finished", self.state.level.id)
        self._notify()
        return finished

    def tick(self) -> bool:
        """Advance the current trip by one step. True once the trip is over or nothing runs."""
        if self.state.progress is None:
            return True
        return self._advance(self.state.progress)

    def cancel_animation(self) -> None:
        if self._animation is not None:
            self._animation.cancel()
            self._animation = None

    # ------------------------------------------------------------------
    # Route lookup
    # ------------------------------------------------------------------

    def _lookup_route(self, level: Level) -> Route:
        try:
            return self._router(level.start, level.end)
        except RouteUnavailable as e:
            logger.warning("Level %s: routing failed (%s), using straight line", level.id, e)
            return Route.straight(level.start, level.end)
        except Exception:
            # a broken router must still leave the level playable
            logger.exception("Level %s: router raised, using straight line", level.id)
            return Route.straight(level.start, level.end)

    def _apply_route(self, token: int, level_id: int, route: Route) -> None:
        if token != self._load_token or level_id != self.state.level.id:
            logger.debug("Dropping stale route for level %s", level_id)
            return
        self.state.route = route
        logger.info("Level %s: %s route with %d points", level_id, route.source, len(route.points))
        self._notify()

    # ------------------------------------------------------------------
    # Rendering surface
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    def snapshot(self) -> Dict[str, Any]:
        st = self.state
        route = st.route
        return {
            "level": st.level.to_dict(),
            "position": {"lat": st.pos[0], "lon": st.pos[1]},
            "selected_transport": st.selected,
            "result_visible": st.result_visible,
            "eco_score": st.eco_score,
            "completed_levels": sorted(st.completed),
            "animating": self.animating,
            "finished": self.finished,
            "route": None if route is None else {
                "source": route.source,
                "length_m": route.length_m,
                "points": [list(p) for p in route.points],
            },
            "result": None if st.last_result is None else st.last_result.to_dict(),
        }
