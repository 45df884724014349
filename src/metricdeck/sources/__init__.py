"""Metrics sources - registry, shared types and content loaders."""

from .base import (
    ContentLoader,
    LoadedContent,
    LoadOutcome,
    Metric,
    Source,
    SourceKind,
)
from .loaders import FileContentLoader, HttpContentLoader, LoaderError
from .registry import SourceRegistry, generate_source_id

__all__ = [
    "ContentLoader",
    "LoadedContent",
    "LoadOutcome",
    "Metric",
    "Source",
    "SourceKind",
    "FileContentLoader",
    "HttpContentLoader",
    "LoaderError",
    "SourceRegistry",
    "generate_source_id",
]
