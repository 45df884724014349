"""Tests for the metricdeck CLI."""

import pytest
from click.testing import CliRunner

from metricdeck import __version__
from metricdeck.cli import main
from metricdeck.sources import HttpContentLoader, LoadedContent


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("METRICDECK_SOURCES", raising=False)
    monkeypatch.delenv("METRICDECK_FILES", raising=False)
    return CliRunner()


class TestCli:
    """Tests for CLI commands that need no network."""

    def test_version(self, runner):
        """Test --version prints the package version."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_parse_files(self, runner, tmp_path):
        """Test parse prints aggregated metrics from local files."""
        (tmp_path / "a.prom").write_text("requests_total 1500\nup 1\n")
        (tmp_path / "b.json").write_text('[{"name": "requests_total", "value": 500}]')

        result = runner.invoke(main, ["parse", "a.prom", "b.json"])

        assert result.exit_code == 0, result.output
        assert "requests_total" in result.output
        assert "2.00K" in result.output
        assert "Loaded 2 file(s)" in result.output

    def test_parse_filter(self, runner, tmp_path):
        """Test parse honours the name filter."""
        (tmp_path / "a.prom").write_text("requests_total 1\nup 1\n")

        result = runner.invoke(main, ["parse", "a.prom", "--filter", "UP"])

        assert result.exit_code == 0, result.output
        assert "up" in result.output
        assert "requests_total" not in result.output

    def test_parse_non_object_labels(self, runner, tmp_path):
        """Test parse renders JSON entries whose labels are not an object."""
        (tmp_path / "m.json").write_text('[{"name": "a", "value": 1, "labels": "oops"}]')

        result = runner.invoke(main, ["parse", "m.json"])

        assert result.exit_code == 0, result.output
        assert "Loaded 1 file(s)" in result.output

    def test_show_warns_when_files_ignored(self, runner, tmp_path, monkeypatch):
        """Test show warns that --file is ignored when URLs are given."""
        (tmp_path / "a.prom").write_text("local_only 1\n")

        async def fake_load(self, source):
            return LoadedContent(text="remote_up 1\n")

        monkeypatch.setattr(HttpContentLoader, "load", fake_load)
        result = runner.invoke(main, ["show", "http://example/metrics", "--file", "a.prom"])

        assert result.exit_code == 0, result.output
        assert "is ignored" in result.output
        assert "remote_up" in result.output
        assert "local_only" not in result.output

    def test_init_writes_config(self, runner, tmp_path):
        """Test init writes a loadable sample config."""
        result = runner.invoke(main, ["init", "-o", "deck.yaml"])

        assert result.exit_code == 0
        assert (tmp_path / "deck.yaml").exists()

        sources = runner.invoke(main, ["sources", "-c", "deck.yaml"])
        assert sources.exit_code == 0
        assert "http://localhost:9100/metrics" in sources.output

    def test_sources_none_configured(self, runner):
        """Test sources reports when nothing is configured."""
        result = runner.invoke(main, ["sources"])
        assert result.exit_code == 0
        assert "No sources configured" in result.output

    def test_show_without_sources(self, runner):
        """Test show reports the no-sources status."""
        result = runner.invoke(main, ["show"])
        assert result.exit_code == 0, result.output
        assert "no sources" in result.output
