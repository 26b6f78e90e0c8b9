import asyncio
import json
import logging
from functools import partial
from typing import Any, Callable, Dict, Optional

import aiohttp
from aiohttp import web

from BudgetGame import BudgetGame
from TripSession import TripSession, Router
from catalog import Catalog, DEFAULT_CATALOG
from config import GameConfig
from errors import GameError
from map_view import render_map
from scheduler import AsyncioScheduler, Scheduler
from ws_bus import broadcast, publish, send_error

logger = logging.getLogger(__name__)

PUB_QUEUE_SIZE = 64


def create_app(config: Optional[GameConfig] = None,
               catalog: Catalog = DEFAULT_CATALOG,
               router: Optional[Router] = None,
               scheduler_factory: Callable[[], Scheduler] = AsyncioScheduler) -> web.Application:
    """
    HTTP + websocket front for one TripSession and one BudgetGame.

    Session and game are built on startup, inside the running loop.
    """
    app = web.Application()
    app["config"] = config or GameConfig()
    app["catalog"] = catalog
    app["router"] = router
    app["scheduler_factory"] = scheduler_factory
    app["sockets"] = set()

    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)

    app.router.add_get("/state", get_state)
    app.router.add_get("/catalog", get_catalog)
    app.router.add_get("/map", get_map)
    app.router.add_get("/ws", ws_handler)
    app.router.add_get("/budget", get_budget)
    app.router.add_post("/budget/vehicle", post_budget_vehicle)
    app.router.add_post("/budget/reset", post_budget_reset)
    return app


async def _on_startup(app: web.Application) -> None:
    app["pub_q"] = asyncio.Queue(maxsize=PUB_QUEUE_SIZE)
    scheduler = app["scheduler_factory"]()

    session = TripSession(scheduler, catalog=app["catalog"], config=app["config"], router=app["router"])
    session.subscribe(partial(_publish_state, app))
    app["session"] = session

    budget = BudgetGame(scheduler, catalog=app["catalog"], config=app["config"])
    budget.start()
    app["budget"] = budget

    app["broadcaster"] = asyncio.get_running_loop().create_task(broadcast(app))


async def _on_cleanup(app: web.Application) -> None:
    app["session"].cancel_animation()
    app["budget"].stop()

    task: asyncio.Task = app["broadcaster"]
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass

    for ws in list(app["sockets"]):
        await ws.close(code=aiohttp.WSCloseCode.GOING_AWAY, message=b"server shutdown")


def _publish_state(app: web.Application, snapshot: Dict[str, Any]) -> None:
    publish(app, {"type": "state", "data": snapshot})


# -------------------------
# HTTP
# -------------------------
async def get_state(request: web.Request) -> web.Response:
    return web.json_response(request.app["session"].snapshot())


async def get_catalog(request: web.Request) -> web.Response:
    return web.json_response(request.app["catalog"].to_dict())


async def get_map(request: web.Request) -> web.Response:
    html = render_map(request.app["session"])
    return web.Response(text=html, content_type="text/html")


async def get_budget(request: web.Request) -> web.Response:
    return web.json_response(request.app["budget"].snapshot())


async def post_budget_vehicle(request: web.Request) -> web.Response:
    budget: BudgetGame = request.app["budget"]
    try:
        payload = await request.json()
        accepted = budget.select_vehicle(payload["vehicle"])
    except (ValueError, KeyError, TypeError) as e:
        # UnknownTransport is a KeyError
        return web.json_response({"error": str(e)}, status=400)
    return web.json_response({"accepted": accepted, "state": budget.snapshot()})


async def post_budget_reset(request: web.Request) -> web.Response:
    budget: BudgetGame = request.app["budget"]
    budget.reset()
    return web.json_response(budget.snapshot())


# -------------------------
# websocket
# -------------------------
async def ws_handler(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    app = request.app
    app["sockets"].add(ws)
    await ws.send_json({"type": "state", "data": app["session"].snapshot()})

    try:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                await handle_message(app, ws, msg.data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning("websocket closed with %s", ws.exception())
    finally:
        app["sockets"].discard(ws)
    return ws


async def handle_message(app: web.Application, ws: web.WebSocketResponse, raw: str) -> None:
    session: TripSession = app["session"]
    try:
        msg = json.loads(raw)
        typ = msg.get("type")
    except (ValueError, AttributeError):
        await send_error(ws, "invalid message")
        return

    try:
        if typ == "select":
            session.select_transport(msg["transport"])
        elif typ == "restart":
            session.restart()
        elif typ == "next_level":
            session.next_level()
        elif typ == "load_level":
            session.load_level_id(msg["level_id"])
        elif typ == "verdict":
            v = session.verdict(msg["transport"])
            await ws.send_json({"type": "verdict", "transport": msg["transport"], "verdict": v.value})
        elif typ == "state":
            await ws.send_json({"type": "state", "data": session.snapshot()})
        else:
            await send_error(ws, f"unknown message type: {typ}")
    except GameError as e:
        await send_error(ws, str(e), request=typ)
    except KeyError as e:
        await send_error(ws, f"missing field: {e}", request=typ)
    except TypeError:
        # ids that are lists or objects cannot be looked up
        await send_error(ws, "invalid message", request=typ)
