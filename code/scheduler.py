import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)

Step = Callable[[], bool]  # returns True when the repeating call should stop


class TaskHandle(Protocol):
    done: bool

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_every(self, interval_s: float, step: Step) -> TaskHandle: ...

    def call_later(self, delay_s: float, fn: Callable[[], Any]) -> TaskHandle: ...

    def submit(self, fn: Callable[[], Any], on_done: Callable[[Any], None]) -> TaskHandle: ...


# -------------------------
# asyncio (production)
# -------------------------
class AsyncioHandle:
    def __init__(self, task: asyncio.Task):
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        if not self._task.done():
            self._task.cancel()


class AsyncioScheduler:
    """Runs timers as tasks on the event loop; blocking work goes to a thread."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _spawn(self, coro) -> AsyncioHandle:
        loop = self._loop or asyncio.get_running_loop()
        return AsyncioHandle(loop.create_task(coro))

    def call_every(self, interval_s: float, step: Step) -> AsyncioHandle:
        async def run():
            try:
                while True:
                    await asyncio.sleep(interval_s)
                    if step():
                        return
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("repeating task failed")

        return self._spawn(run())

    def call_later(self, delay_s: float, fn: Callable[[], Any]) -> AsyncioHandle:
        async def run():
            await asyncio.sleep(delay_s)
            try:
                fn()
            except Exception:
                logger.exception("delayed call failed")

        return self._spawn(run())

    def submit(self, fn: Callable[[], Any], on_done: Callable[[Any], None]) -> AsyncioHandle:
        async def run():
            try:
                result = await asyncio.to_thread(fn)
            except Exception:
                logger.exception("background call failed")
                return
            on_done(result)

        return self._spawn(run())


# -------------------------
# virtual clock (tests, headless runs)
# -------------------------
class VirtualHandle:
    def __init__(self):
        self.cancelled = False
        self.finished = False

    @property
    def done(self) -> bool:
        return self.cancelled or self.finished

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class PendingCall:
    fn: Callable[[], Any]
    on_done: Callable[[Any], None]
    handle: VirtualHandle = field(default_factory=VirtualHandle)

    def resolve(self) -> None:
        if self.handle.done:
            return
        result = self.fn()
        self.handle.finished = True
        if not self.handle.cancelled:
            self.on_done(result)


class VirtualClock:
    """
    Deterministic scheduler driven by hand.

    advance() fires due timers in time order, run_pending() resolves
    submitted work in submission order. `pending` exposes unresolved work so
    callers can resolve it out of order.
    """

    def __init__(self, start: float = 0.0, max_fires: int = 1_000_000):
        self.now = start
        self.max_fires = max_fires
        self._timers: list = []  # heap of (due, seq, handle, fn, interval)
        self._seq = itertools.count()
        self._pending: List[PendingCall] = []

    def _push(self, due: float, handle: VirtualHandle, fn, interval: Optional[float]) -> None:
        heapq.heappush(self._timers, (due, next(self._seq), handle, fn, interval))

    def call_every(self, interval_s: float, step: Step) -> VirtualHandle:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        handle = VirtualHandle()
        self._push(self.now + interval_s, handle, step, interval_s)
        return handle

    def call_later(self, delay_s: float, fn: Callable[[], Any]) -> VirtualHandle:
        handle = VirtualHandle()
        self._push(self.now + delay_s, handle, fn, None)
        return handle

    def submit(self, fn: Callable[[], Any], on_done: Callable[[Any], None]) -> VirtualHandle:
        call = PendingCall(fn=fn, on_done=on_done)
        self._pending.append(call)
        return call.handle

    @property
    def pending(self) -> List[PendingCall]:
        self._pending = [c for c in self._pending if not c.handle.done]
        return list(self._pending)

    @property
    def active_timers(self) -> int:
        return sum(1 for t in self._timers if not t[2].done)

    def run_pending(self) -> int:
        calls = self.pending
        self._pending = []
        for call in calls:
            call.resolve()
        return len(calls)

    def _fire_next(self, until: float) -> bool:
        while self._timers and self._timers[0][2].done:
            heapq.heappop(self._timers)
        if not self._timers or self._timers[0][0] > until + 1e-12:
            return False

        due, _, handle, fn, interval = heapq.heappop(self._timers)
        self.now = max(self.now, due)
        if interval is None:
            handle.finished = True
            fn()
        elif fn():
            handle.finished = True
        elif not handle.done:
            self._push(due + interval, handle, fn, interval)
        return True

    def advance(self, seconds: float) -> int:
        target = self.now + seconds
        fired = 0
        while self._fire_next(target):
            fired += 1
            if fired > self.max_fires:
                raise RuntimeError("too many timer fires; a repeating task never finishes")
        self.now = target
        return fired

    def run_until_idle(self) -> int:
        """Fire timers until none are left. Never-ending timers raise RuntimeError."""
        fired = 0
        while self._fire_next(float("inf")):
            fired += 1
            if fired > self.max_fires:
                raise RuntimeError("too many timer fires; a repeating task never finishes")
        return fired
