"""Source registry - bookkeeping for the sources a dashboard reads from."""

import logging
import random
import string
from typing import Callable, Optional

from .base import Source, SourceKind

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 8


def generate_source_id(rng: Optional[random.Random] = None) -> str:
    """Return a short random base36 token."""
    rng = rng or random
    return "".join(rng.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


class SourceRegistry:
    """
    Registry of configured sources.

    Sources are kept in insertion order. Duplicate names are allowed and are
    tracked as distinct sources. The registry performs no I/O; an optional
    ``on_change`` callback is invoked after every mutation so a presentation
    layer can redraw.
    """

    def __init__(
        self,
        on_change: Optional[Callable[[list[Source]], None]] = None,
        id_factory: Callable[[], str] = generate_source_id,
    ):
        self._sources: dict[str, Source] = {}
        self._on_change = on_change
        self._id_factory = id_factory

    def add(self, kind: SourceKind | str, name: str) -> str:
        """Register a source and return its generated id."""
        if not name or not name.strip():
            raise ValueError("Source name must not be empty")

        source_id = self._id_factory()
        while source_id in self._sources:
            source_id = self._id_factory()

        source = Source(source_id=source_id, kind=SourceKind(kind), name=name)
        self._sources[source_id] = source
        logger.debug(f"Registered {source.kind.value} source {name} ({source_id})")
        self._notify()
        return source_id

    def remove(self, source_id: str):
        """Forget a source. Unknown ids are ignored."""
        source = self._sources.pop(source_id, None)
        if source is None:
            return
        logger.debug(f"Removed source {source.name} ({source_id})")
        self._notify()

    def get(self, source_id: str) -> Optional[Source]:
        return self._sources.get(source_id)

    def remote(self) -> list[Source]:
        """List the sources the scheduler fetches on every cycle."""
        return [s for s in self._sources.values() if s.is_remote]

    def has_name(self, name: str) -> bool:
        return any(s.name == name for s in self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self):
        return iter(self.list())

    def _notify(self):
        if self._on_change is not None:
            self._on_change(self.list())

    # Must stay last: shadows the builtin inside the class body.
    def list(self) -> list[Source]:
        """List all sources in registration order."""
        return list(self._sources.values())
