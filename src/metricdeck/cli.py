"""metricdeck CLI - aggregate metrics from endpoints and files."""

import asyncio
import logging
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .config import DashboardConfig, load_config
from .dashboard import Dashboard, filter_snapshot
from .display import build_metrics_table, build_sources_table
from .sources import SourceKind, SourceRegistry
from .store import MetricSeries

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _prepare_config(
    config_path: Optional[str],
    urls: tuple[str, ...],
    files: tuple[str, ...],
    filter_text: Optional[str],
    log_level: Optional[str],
) -> DashboardConfig:
    config = load_config(config_path)

    # Override with CLI options
    if urls:
        config.sources = list(urls)
    if files:
        config.files = list(files)
    if filter_text is not None:
        config.filter_text = filter_text
    if log_level:
        config.log_level = log_level

    setup_logging(config.log_level)
    return config


def _print_snapshot(snapshot: dict[str, MetricSeries], filter_text: str, status: str = ""):
    view = filter_snapshot(snapshot, filter_text)
    if not view:
        console.print("[yellow]No metrics[/yellow]")
    else:
        console.print(build_metrics_table(view, title=f"{len(view)} metric name(s)"))
    if status:
        console.print(f"[dim]{status}[/dim]")


@click.group()
@click.version_option(version=__version__, prog_name="metricdeck")
def main():
    """metricdeck - merge and sum metrics from exposition and JSON sources."""
    pass


@main.command()
@click.argument("urls", nargs=-1)
@click.option("--file", "-f", "files", multiple=True, type=click.Path(exists=True, dir_okay=False), help="Local metrics file")
@click.option("--config", "-c", "config_path", help="Path to config file")
@click.option("--filter", "filter_text", default=None, help="Only show names containing this text")
@click.option("--log-level", default=None, help="Log level")
def show(
    urls: tuple[str, ...],
    files: tuple[str, ...],
    config_path: Optional[str],
    filter_text: Optional[str],
    log_level: Optional[str],
):
    """Run one refresh cycle and print the aggregated metrics."""
    config = _prepare_config(config_path, urls, files, filter_text, log_level)
    dashboard = Dashboard.from_config(config)
    if config.files and config.sources:
        logger.warning("Ignoring local files because remote sources are configured")
        console.print("[yellow]--file is ignored when URLs are given; use `metricdeck parse` for files[/yellow]")

    async def _show():
        try:
            if config.files and not config.sources:
                status = await dashboard.load_files(config.files)
            else:
                for url in config.sources:
                    dashboard.registry.add(SourceKind.REMOTE, url)
                status = await dashboard.refresh()
            _print_snapshot(dashboard.store.snapshot(), config.filter_text, status)
        finally:
            await dashboard.close()

    asyncio.run(_show())


@main.command()
@click.argument("urls", nargs=-1)
@click.option("--config", "-c", "config_path", help="Path to config file")
@click.option("--interval", "-i", default=None, help="Refresh interval in seconds (minimum 2)")
@click.option("--filter", "filter_text", default=None, help="Only show names containing this text")
@click.option("--log-level", default=None, help="Log level")
def watch(
    urls: tuple[str, ...],
    config_path: Optional[str],
    interval: Optional[str],
    filter_text: Optional[str],
    log_level: Optional[str],
):
    """Refresh periodically and redraw after every cycle."""
    config = _prepare_config(config_path, urls, (), filter_text, log_level)
    if interval is not None:
        config.refresh_interval = interval
    config.auto_refresh = True

    dashboard = Dashboard.from_config(
        config,
        on_snapshot=lambda snapshot: _print_snapshot(snapshot, config.filter_text),
        on_status=lambda status: console.print(f"[dim]{status}[/dim]"),
    )

    console.print(Panel(
        f"[bold green]metricdeck v{__version__}[/bold green]\n"
        f"Sources: {', '.join(config.sources) or 'none'}\n"
        f"Interval: {dashboard.scheduler.interval:g}s",
        title="Watching",
    ))

    async def _watch():
        await dashboard.start(config.sources)
        try:
            await asyncio.Event().wait()
        finally:
            await dashboard.close()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--filter", "filter_text", default="", help="Only show names containing this text")
def parse(paths: tuple[str, ...], filter_text: str):
    """Parse local metrics files (.json or exposition text)."""
    dashboard = Dashboard()

    async def _parse():
        try:
            status = await dashboard.load_files(paths)
            _print_snapshot(dashboard.store.snapshot(), filter_text, status)
        finally:
            await dashboard.close()

    asyncio.run(_parse())


@main.command()
@click.option("--config", "-c", "config_path", help="Path to config file")
def sources(config_path: Optional[str]):
    """List the sources a config file would register."""
    config = load_config(config_path)
    registry = SourceRegistry()
    for url in config.sources:
        registry.add(SourceKind.REMOTE, url)
    for path in config.files:
        registry.add(SourceKind.LOCAL, path)

    if not len(registry):
        console.print("[yellow]No sources configured[/yellow]")
        return
    console.print(build_sources_table(registry.list()))


@main.command()
@click.option("--output", "-o", type=click.Path(), help="Output file path")
def init(output: Optional[str]):
    """Generate a sample configuration file."""
    sample_config = """# metricdeck configuration

# Remote endpoints; the response content type picks the parser
sources:
  - http://localhost:9100/metrics
  # - url: http://localhost:8080/metrics.json

# Local files; .json files are parsed as JSON, anything else as exposition text
files: []

# Seconds between refreshes (minimum 2, invalid values fall back to 10)
refresh_interval: 10
auto_refresh: true

http:
  timeout: 10
  headers: {}

filter: ""
log_level: INFO
"""

    output_path = output or "metricdeck.yaml"

    with open(output_path, "w") as f:
        f.write(sample_config)

    console.print(f"[green]+ Created config file: {output_path}[/green]")
    console.print("\nEdit the file to list your endpoints, then run:")
    console.print(f"  [cyan]metricdeck watch -c {output_path}[/cyan]")


if __name__ == "__main__":
    main()
