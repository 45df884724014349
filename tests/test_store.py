"""Tests for the aggregation store and number formatting."""

import math

import pytest

from metricdeck.sources import Metric
from metricdeck.store import AggregationStore, aggregate, format_number


class TestAggregationStore:
    """Tests for AggregationStore."""

    def test_aggregate_skips_non_finite(self):
        """Test NaN contributes zero to the sum but is still recorded."""
        store = AggregationStore()
        store.add([
            Metric(name="m", value=1.0),
            Metric(name="m", value=2.0),
            Metric(name="m", value=math.nan),
        ], "src")

        snapshot = store.snapshot()
        assert snapshot["m"].aggregate == 3.0
        assert len(snapshot["m"].records) == 3
        assert math.isnan(snapshot["m"].records[2].value)

    def test_add_attaches_provenance(self):
        """Test every stored record carries the provenance label."""
        store = AggregationStore()
        original = Metric(name="up", value=1.0)
        store.add([original], "http://a/metrics")

        stored = store.records("up")[0]
        assert stored.source == "http://a/metrics"
        assert original.source is None

    def test_merges_across_sources_in_order(self):
        """Test records with one name keep insertion order across adds."""
        store = AggregationStore()
        store.add([Metric(name="req", value=1.0, labels={"i": "1"})], "a")
        store.add([Metric(name="other", value=9.0)], "a")
        store.add([Metric(name="req", value=4.0)], "b")

        assert [r.source for r in store.records("req")] == ["a", "b"]
        assert store.aggregate("req") == 5.0
        assert store.names() == ["req", "other"]

    def test_no_deduplication(self):
        """Test identical records are all kept."""
        store = AggregationStore()
        store.add([Metric(name="x", value=1.0)] * 3, "s")
        assert len(store.records("x")) == 3
        assert store.aggregate("x") == 3.0

    def test_clear(self):
        """Test clear drops the whole cycle."""
        store = AggregationStore()
        store.add([Metric(name="x", value=1.0)], "s")
        store.clear()

        assert len(store) == 0
        assert "x" not in store
        assert store.snapshot() == {}
        assert store.records("x") == ()
        assert store.aggregate("x") == 0.0

    def test_snapshot_is_detached(self):
        """Test a snapshot does not change when the store does."""
        store = AggregationStore()
        store.add([Metric(name="x", value=1.0)], "s")
        snapshot = store.snapshot()
        store.add([Metric(name="x", value=2.0)], "s")

        assert len(snapshot["x"].records) == 1

    def test_stored_labels_detached_from_input(self):
        """Test records keep their own read-only copy of the labels."""
        labels = {"job": "api"}
        metric = Metric(name="up", value=1.0, labels=labels)
        store = AggregationStore()
        store.add([metric], "s")

        labels["job"] = "changed"
        stored = store.records("up")[0]

        assert metric.labels == {"job": "api"}
        assert stored.labels == {"job": "api"}
        with pytest.raises(TypeError):
            stored.labels["job"] = "x"

    def test_records_are_hashable(self):
        """Test records with and without labels can be hashed and deduplicated in sets."""
        a = Metric(name="up", value=1.0, labels={"job": "api"})
        b = Metric(name="up", value=1.0, labels={"job": "api"})
        assert hash(a) == hash(b)
        assert len({a, b, Metric(name="up", value=1.0)}) == 2
        assert a.with_source("s").labels == {"job": "api"}

    def test_aggregate_helper(self):
        """Test the sum helper ignores infinities."""
        assert aggregate([1.0, math.inf, -math.inf, 2.5]) == 3.5
        assert aggregate([]) == 0.0


class TestFormatNumber:
    """Tests for format_number."""

    @pytest.mark.parametrize("value, expected", [
        (0, "0"),
        (3, "3"),
        (1.5, "1.5"),
        (1 / 3, "0.33"),
        (0.125, "0.13"),
        (-12.344, "-12.34"),
        (999.99, "999.99"),
        (1000, "1.00K"),
        (1234.5, "1.23K"),
        (-2500, "-2.50K"),
        (1_500_000, "1.50M"),
        (2_000_000_000, "2.00B"),
        (math.nan, "NaN"),
        (math.inf, "NaN"),
        (-math.inf, "NaN"),
    ])
    def test_format(self, value, expected):
        """Test suffixes, rounding and non-finite markers."""
        assert format_number(value) == expected
