import asyncio
import logging
from typing import Any, Dict, Set

from aiohttp import web

logger = logging.getLogger(__name__)


def _drop_oldest(q: asyncio.Queue) -> None:
    # keep only latest events if queue is full
    if q.full():
        try:
            q.get_nowait()
            q.task_done()
        except asyncio.QueueEmpty:
            pass


def publish(app: web.Application, event: Dict[str, Any]) -> None:
    """Queue an event for broadcast. Synchronous so session listeners can call it."""
    q: asyncio.Queue = app["pub_q"]
    _drop_oldest(q)
    q.put_nowait(event)


async def send_error(ws: web.WebSocketResponse, error: str, **extra) -> None:
    event = {"type": "error", "error": error}
    event.update(extra)
    await ws.send_json(event)


async def broadcast(app: web.Application) -> None:
    """Fan every published event out to all connected sockets. Runs until cancelled."""
    q: asyncio.Queue = app["pub_q"]
    sockets: Set[web.WebSocketResponse] = app["sockets"]

    while True:
        event = await q.get()
        try:
            for ws in list(sockets):
                if ws.closed:
                    sockets.discard(ws)
                    continue
                try:
                    await ws.send_json(event)
                except ConnectionResetError:
                    logger.debug("socket gone while broadcasting")
                    sockets.discard(ws)
        finally:
            q.task_done()
