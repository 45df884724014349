"""Aggregation store - the current refresh cycle's metrics, grouped by name."""

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from .sources.base import Metric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricSeries:
    """All records reported under one name in a cycle, plus their sum."""

    name: str
    records: tuple[Metric, ...]
    aggregate: float


def aggregate(values: Iterable[float]) -> float:
    """Sum values, counting non-finite ones as zero."""
    return sum((v for v in values if math.isfinite(v)), 0.0)


def format_number(n: float) -> str:
    """
    Format a number for display.

    Large magnitudes are abbreviated with K/M/B suffixes and two decimals;
    smaller ones are rounded to two decimals. Non-finite values render as
    ``NaN``.
    """
    if not math.isfinite(n):
        return "NaN"
    if abs(n) >= 1e9:
        return f"{n / 1e9:.2f}B"
    if abs(n) >= 1e6:
        return f"{n / 1e6:.2f}M"
    if abs(n) >= 1e3:
        return f"{n / 1e3:.2f}K"

    rounded = math.floor(n * 100 + 0.5) / 100
    if rounded.is_integer():
        return str(int(rounded))
    return str(rounded)


class AggregationStore:
    """
    Holds the metrics of the current refresh cycle.

    The store is cleared at the start of every cycle; nothing is retained
    from earlier cycles.
    """

    def __init__(self):
        self._by_name: dict[str, list[Metric]] = {}

    def clear(self):
        """Drop every record of the current cycle."""
        self._by_name.clear()

    def add(self, metrics: Iterable[Metric], provenance: str):
        """Tag metrics with their provenance and append them by name."""
        count = 0
        for metric in metrics:
            self._by_name.setdefault(metric.name, []).append(metric.with_source(provenance))
            count += 1
        logger.debug(f"Stored {count} metrics from {provenance}")

    def records(self, name: str) -> tuple[Metric, ...]:
        return tuple(self._by_name.get(name, ()))

    def aggregate(self, name: str) -> float:
        return aggregate(m.value for m in self._by_name.get(name, ()))

    def names(self) -> list[str]:
        return list(self._by_name)

    def snapshot(self) -> dict[str, MetricSeries]:
        """Return an immutable view of the current cycle."""
        return {
            name: MetricSeries(
                name=name,
                records=tuple(records),
                aggregate=aggregate(m.value for m in records),
            )
            for name, records in self._by_name.items()
        }

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name
