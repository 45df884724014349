"""Refresh scheduler - drives fan-out/fan-in refresh cycles."""

import asyncio
import logging
import math
import time
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from .parsers import parse_content
from .sources.base import ContentLoader, LoadOutcome, Source
from .sources.registry import SourceRegistry
from .store import AggregationStore, MetricSeries

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 10.0  # seconds
MIN_INTERVAL = 2.0

NO_SOURCES_STATUS = "no sources"
LOADING_STATUS = "Loading..."


class SchedulerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"


def resolve_interval(value: Any) -> float:
    """
    Turn user input into a refresh interval in seconds.

    Non-numeric, zero or non-finite input falls back to the default; the
    result is never below ``MIN_INTERVAL``.
    """
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        seconds = 0.0
    if not math.isfinite(seconds) or seconds == 0:
        seconds = DEFAULT_INTERVAL
    return max(MIN_INTERVAL, seconds)


class Timer(ABC):
    """A single recurring timer."""

    @abstractmethod
    def start(self, interval: float, callback: Callable[[], Any]):
        """Call ``callback`` every ``interval`` seconds until cancelled."""
        pass

    @abstractmethod
    def cancel(self):
        """Stop future ticks. Work already started by a tick is not affected."""
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        pass


class AsyncioTimer(Timer):
    """Timer backed by a task on the running event loop."""

    def __init__(self):
        self._task: Optional[asyncio.Task] = None

    def start(self, interval: float, callback: Callable[[], Any]):
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(interval, callback))

    async def _run(self, interval: float, callback: Callable[[], Any]):
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception as e:
                logger.error(f"Timer callback failed: {e}")

    def cancel(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()


class RefreshScheduler:
    """
    Coordinates refresh cycles.

    A cycle clears the store, loads every remote source concurrently, joins
    on all loads and then adds each successful source's metrics in registry
    order. A failing source is logged and contributes nothing; it stays
    registered and is retried on the next cycle.

    Starting a cycle does not cancel loads from an earlier one. If an older
    cycle finishes after a newer one cleared the store, its results are
    still added.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        store: AggregationStore,
        loader: ContentLoader,
        timer: Optional[Timer] = None,
        interval: Any = DEFAULT_INTERVAL,
        auto_refresh: bool = False,
        on_status: Optional[Callable[[str], None]] = None,
        on_snapshot: Optional[Callable[[dict[str, MetricSeries]], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.registry = registry
        self.store = store
        self.loader = loader
        self.timer = timer or AsyncioTimer()
        self._interval = resolve_interval(interval)
        self._auto_refresh = bool(auto_refresh)
        self._on_status = on_status
        self._on_snapshot = on_snapshot
        self._clock = clock

        self._state = SchedulerState.IDLE
        self._status = ""
        self._pending: set[asyncio.Task] = set()
        self.last_outcomes: list[LoadOutcome] = []
        self.cycles = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def status(self) -> str:
        return self._status

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def auto_refresh(self) -> bool:
        return self._auto_refresh

    def snapshot(self) -> dict[str, MetricSeries]:
        return self.store.snapshot()

    async def refresh_once(self) -> str:
        """Run one refresh cycle and return its status line."""
        sources = self.registry.list()
        if not sources:
            self.store.clear()
            self._publish_snapshot()
            return self.set_status(NO_SOURCES_STATUS)

        self._state = SchedulerState.LOADING
        self.set_status(LOADING_STATUS)
        self.store.clear()

        remote = [s for s in sources if s.is_remote]
        outcomes = await asyncio.gather(*(self._load_source(s) for s in remote))

        for outcome in outcomes:
            if outcome.success:
                self.store.add(outcome.metrics, outcome.source.name)

        self.last_outcomes = list(outcomes)
        self.cycles += 1
        self._state = SchedulerState.IDLE
        self._publish_snapshot()

        failed = sum(1 for o in outcomes if not o.success)
        if failed:
            logger.warning(f"{failed} of {len(remote)} remote source(s) failed this cycle")

        status = f"Updated {self._clock().strftime('%H:%M:%S')} from {len(sources)} source(s)"
        logger.info(status)
        return self.set_status(status)

    def request_refresh(self) -> asyncio.Task:
        """Schedule a refresh cycle on the running loop."""
        task = asyncio.get_running_loop().create_task(self.refresh_once())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_pending(self):
        """Wait for every cycle started through ``request_refresh``."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def configure(self, interval: Any = None, enabled: Optional[bool] = None):
        """Change the interval and/or auto-refresh flag and restart the timer."""
        if interval is not None:
            self._interval = resolve_interval(interval)
        if enabled is not None:
            self._auto_refresh = bool(enabled)
        self.restart_timer()

    def restart_timer(self):
        self.timer.cancel()
        if not self._auto_refresh:
            return
        self.timer.start(self._interval, self.request_refresh)
        logger.debug(f"Auto refresh every {self._interval:g}s")

    def stop(self):
        """Stop scheduled ticks. In-flight cycles keep running."""
        self.timer.cancel()

    def set_status(self, status: str) -> str:
        self._status = status
        if self._on_status is not None:
            self._on_status(status)
        return status

    async def _load_source(self, source: Source) -> LoadOutcome:
        """Load and parse one source. Never raises."""
        start = time.time()
        try:
            content = await self.loader.load(source)
            metrics = parse_content(content)
        except Exception as e:
            logger.error(f"Fetch failed for {source.name}: {e!r}")
            return LoadOutcome(
                source=source,
                success=False,
                error=str(e) or type(e).__name__,
                duration_ms=(time.time() - start) * 1000,
            )

        duration_ms = (time.time() - start) * 1000
        logger.debug(f"Collected {len(metrics)} metrics from {source.name} in {duration_ms:.1f}ms")
        return LoadOutcome(source=source, success=True, metrics=metrics, duration_ms=duration_ms)

    def _publish_snapshot(self):
        if self._on_snapshot is None:
            return
        try:
            self._on_snapshot(self.store.snapshot())
        except Exception as e:
            logger.error(f"Snapshot listener failed: {e!r}")
