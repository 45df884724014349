"""Dashboard - owns the registry, store, loaders and scheduler."""

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import DashboardConfig
from .parsers import parse_content
from .scheduler import RefreshScheduler, Timer
from .sources import (
    ContentLoader,
    FileContentLoader,
    HttpContentLoader,
    Metric,
    Source,
    SourceKind,
    SourceRegistry,
)
from .store import AggregationStore, MetricSeries

logger = logging.getLogger(__name__)


class Dashboard:
    """
    Context object wiring the metric pipeline together.

    Nothing here is global: each dashboard has its own registry, store and
    scheduler. Presentation code subscribes through the ``on_*`` callbacks.
    """

    def __init__(
        self,
        loader: Optional[ContentLoader] = None,
        file_loader: Optional[FileContentLoader] = None,
        timer: Optional[Timer] = None,
        interval: object = None,
        auto_refresh: bool = False,
        on_status: Optional[Callable[[str], None]] = None,
        on_snapshot: Optional[Callable[[dict[str, MetricSeries]], None]] = None,
        on_sources_changed: Optional[Callable[[list[Source]], None]] = None,
    ):
        self.registry = SourceRegistry(on_change=on_sources_changed)
        self.store = AggregationStore()
        self.loader = loader or HttpContentLoader()
        self.file_loader = file_loader or FileContentLoader()
        self.scheduler = RefreshScheduler(
            registry=self.registry,
            store=self.store,
            loader=self.loader,
            timer=timer,
            interval=interval,
            auto_refresh=auto_refresh,
            on_status=on_status,
            on_snapshot=on_snapshot,
        )
        self._on_snapshot = on_snapshot
        self.filter_text = ""

    @classmethod
    def from_config(cls, config: DashboardConfig, **kwargs) -> "Dashboard":
        """Create a dashboard from config. Sources are registered on ``start``."""
        kwargs.setdefault("loader", HttpContentLoader(
            timeout=config.http.timeout,
            headers=config.http.headers,
            user_agent=config.http.user_agent,
        ))
        dashboard = cls(
            interval=config.refresh_interval,
            auto_refresh=config.auto_refresh,
            **kwargs,
        )
        dashboard.filter_text = config.filter_text
        return dashboard

    @property
    def status(self) -> str:
        return self.scheduler.status

    def sources(self) -> list[Source]:
        return self.registry.list()

    def add_remote(self, url: str) -> str:
        """Register a URL and schedule a refresh."""
        url = url.strip()
        source_id = self.registry.add(SourceKind.REMOTE, url)
        logger.info(f"Added source {url}")
        self.scheduler.request_refresh()
        return source_id

    def ensure_remote(self, url: str) -> Optional[str]:
        """Register a URL unless a source with that name already exists."""
        if self.registry.has_name(url):
            return None
        return self.add_remote(url)

    def remove_source(self, source_id: str):
        self.registry.remove(source_id)

    async def refresh(self) -> str:
        return await self.scheduler.refresh_once()

    async def load_files(self, paths: Iterable[str | Path]) -> str:
        """
        Load local metric files into a fresh snapshot.

        ``.json`` files go through the JSON normalizer, everything else
        through the exposition parser. A file that cannot be read, or a JSON
        file that fails to decode, contributes no metrics. Each file is
        registered as a local source named after the file.
        """
        paths = [Path(p) for p in paths]
        if not paths:
            return self.status

        self.store.clear()
        for path in paths:
            try:
                content = await self.file_loader.load_path(path)
            except OSError as e:
                logger.error(f"Could not read {path}: {e}")
                metrics = []
            else:
                metrics = self._parse_local(content, path)
            self.store.add(metrics, path.name)
            self.registry.add(SourceKind.LOCAL, path.name)

        if self._on_snapshot is not None:
            try:
                self._on_snapshot(self.store.snapshot())
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e!r}")
        return self.scheduler.set_status(f"Loaded {len(paths)} file(s)")

    def _parse_local(self, content, path: Path) -> list[Metric]:
        try:
            return parse_content(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed JSON in {path}: {e}")
            return []

    def set_filter(self, text: str):
        self.filter_text = text or ""

    def view(self) -> dict[str, MetricSeries]:
        """Snapshot restricted to names containing the filter text."""
        return filter_snapshot(self.store.snapshot(), self.filter_text)

    async def start(self, urls: Iterable[str] = ()):
        """Register initial URLs, run a first cycle and arm the timer."""
        for url in urls:
            if url.strip():
                self.registry.add(SourceKind.REMOTE, url.strip())
        await self.scheduler.refresh_once()
        self.scheduler.restart_timer()

    async def close(self):
        self.scheduler.stop()
        await self.scheduler.wait_pending()
        await self.loader.close()


def filter_snapshot(snapshot: dict[str, MetricSeries], text: str) -> dict[str, MetricSeries]:
    """Keep series whose name contains ``text``, case-insensitively."""
    needle = (text or "").lower()
    if not needle:
        return dict(snapshot)
    return {name: series for name, series in snapshot.items() if needle in name.lower()}
