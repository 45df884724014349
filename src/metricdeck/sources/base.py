"""Base types shared by sources, loaders, parsers and the store."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"


class SourceKind(str, Enum):
    """Where a source's content comes from."""
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class Source:
    """A configured metrics source."""

    source_id: str
    kind: SourceKind
    name: str  # URL for remote sources, file name for local ones

    @property
    def is_remote(self) -> bool:
        return self.kind is SourceKind.REMOTE


@dataclass(frozen=True)
class Metric:
    """A single metric sample, normalized from any input format."""

    name: str
    value: float
    labels: Optional[Mapping[str, str]] = None
    source: Optional[str] = None  # Provenance, attached by the store

    def __post_init__(self):
        # Read-only copy, detached from the caller's mapping
        if self.labels is not None:
            object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    def __hash__(self) -> int:
        labels = frozenset(self.labels.items()) if self.labels is not None else None
        return hash((self.name, self.value, labels, self.source))

    def with_source(self, source: str) -> "Metric":
        """Return a copy of this sample tagged with its provenance."""
        return replace(self, source=source)


@dataclass
class LoadedContent:
    """Raw content returned by a loader, with a content-type hint."""

    text: str
    content_type: str = TEXT_CONTENT_TYPE
    location: str = ""

    @property
    def is_json(self) -> bool:
        return JSON_CONTENT_TYPE in self.content_type.lower()


@dataclass
class LoadOutcome:
    """Result of loading and parsing one source during a refresh cycle."""

    source: Source
    success: bool
    metrics: list[Metric] = field(default_factory=list)
    error: Optional[str] = None
    duration_ms: float = 0.0


class ContentLoader(ABC):
    """
    Fetches the raw content of a source.

    Implement this interface to read metrics from somewhere new.

    Example:
        class StaticLoader(ContentLoader):
            async def load(self, source: Source) -> LoadedContent:
                return LoadedContent(text="up 1")
    """

    @abstractmethod
    async def load(self, source: Source) -> LoadedContent:
        """
        Load the content behind a source.

        Raises:
            LoaderError or an I/O error if the content cannot be read
        """
        pass

    async def close(self):
        """Clean up resources. Override if needed."""
        pass
