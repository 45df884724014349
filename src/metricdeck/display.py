"""Rich rendering of dashboard snapshots."""

from typing import Mapping, Optional

from rich.table import Table
from rich.text import Text

from .sources.base import Metric, Source
from .store import MetricSeries, format_number


def format_labels(labels: Optional[Mapping[str, str]]) -> str:
    """Render labels as ``{k="v",...}``, or an empty string."""
    if not labels:
        return ""
    return "{" + ",".join(f'{k}="{v}"' for k, v in labels.items()) + "}"


def format_record(metric: Metric) -> Text:
    text = Text(f"{format_labels(metric.labels)} = ")
    text.append(format_number(metric.value), style="bold")
    if metric.source:
        text.append(f" @{metric.source}", style="dim")
    return text


def build_metrics_table(
    snapshot: dict[str, MetricSeries],
    title: Optional[str] = None,
) -> Table:
    """Build a table with one row per metric name."""
    table = Table(title=title, show_lines=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Aggregate", justify="right", style="bold")
    table.add_column("Details")

    for name, series in snapshot.items():
        details = Text("\n").join(format_record(m) for m in series.records)
        table.add_row(name, format_number(series.aggregate), details)

    return table


def build_sources_table(sources: list[Source]) -> Table:
    table = Table(title="Sources", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Name")
    for source in sources:
        table.add_row(source.source_id, source.kind.value, source.name)
    return table
