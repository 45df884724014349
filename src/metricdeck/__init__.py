"""metricdeck - aggregate metric snapshots from exposition text and JSON sources."""

__version__ = "0.1.0"

from .dashboard import Dashboard
from .scheduler import RefreshScheduler
from .sources import Metric, Source, SourceKind, SourceRegistry
from .store import AggregationStore, MetricSeries, format_number

__all__ = [
    "__version__",
    "AggregationStore",
    "Dashboard",
    "Metric",
    "MetricSeries",
    "RefreshScheduler",
    "Source",
    "SourceKind",
    "SourceRegistry",
    "format_number",
]
