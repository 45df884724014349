"""Tests for table rendering."""

from rich.console import Console

from metricdeck.display import build_metrics_table, build_sources_table, format_labels, format_record
from metricdeck.sources import Metric, SourceKind, SourceRegistry
from metricdeck.store import AggregationStore


def render(renderable) -> str:
    console = Console(width=120, record=True)
    console.print(renderable)
    return console.export_text()


class TestDisplay:
    """Tests for display helpers."""

    def test_format_labels(self):
        """Test label rendering."""
        assert format_labels(None) == ""
        assert format_labels({}) == ""
        assert format_labels({"a": "1", "b": "x"}) == '{a="1",b="x"}'

    def test_format_record(self):
        """Test a record line shows labels, value and provenance."""
        metric = Metric(name="m", value=1500.0, labels={"a": "1"}, source="src")
        assert format_record(metric).plain == '{a="1"} = 1.50K @src'
        assert format_record(Metric(name="m", value=2.0)).plain == " = 2"

    def test_metrics_table(self):
        """Test one row per name with the aggregate."""
        store = AggregationStore()
        store.add([Metric(name="req", value=1.0), Metric(name="req", value=2.0)], "a")
        output = render(build_metrics_table(store.snapshot()))

        assert "req" in output
        assert "@a" in output
        assert " 3 " in output

    def test_sources_table(self):
        """Test source listing shows kind and name."""
        registry = SourceRegistry()
        registry.add(SourceKind.LOCAL, "metrics.json")
        output = render(build_sources_table(registry.list()))

        assert "local" in output
        assert "metrics.json" in output

