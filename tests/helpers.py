"""Test doubles shared across test modules."""

import asyncio
from typing import Any, Callable

from metricdeck.scheduler import Timer
from metricdeck.sources import ContentLoader, LoadedContent, Source


class FakeTimer(Timer):
    """Timer that only ticks when the test says so."""

    def __init__(self):
        self.interval = None
        self.callback = None
        self.starts = 0
        self.cancels = 0

    def start(self, interval: float, callback: Callable[[], Any]):
        self.interval = interval
        self.callback = callback
        self.starts += 1

    def cancel(self):
        if self.callback is not None:
            self.cancels += 1
        self.interval = None
        self.callback = None

    @property
    def active(self) -> bool:
        return self.callback is not None

    def tick(self):
        assert self.callback is not None, "timer is not running"
        return self.callback()


class StaticLoader(ContentLoader):
    """Loader serving canned content per source name."""

    def __init__(self, responses: dict[str, Any]):
        self.responses = responses
        self.calls: list[str] = []

    async def load(self, source: Source) -> LoadedContent:
        self.calls.append(source.name)
        await asyncio.sleep(0)
        response = self.responses[source.name]
        if isinstance(response, Exception):
            raise response
        return response
