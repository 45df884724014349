"""Configuration management for metricdeck."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .sources.loaders import DEFAULT_USER_AGENT


@dataclass
class HttpSettings:
    """HTTP loader configuration."""

    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class DashboardConfig:
    """Main dashboard configuration."""

    http: HttpSettings = field(default_factory=HttpSettings)

    # Remote endpoints (exposition text or JSON)
    sources: list[str] = field(default_factory=list)

    # Local metric files, parsed by extension
    files: list[str] = field(default_factory=list)

    # Refresh settings; the interval is resolved and clamped by the scheduler
    refresh_interval: float | str = 10
    auto_refresh: bool = True

    filter_text: str = ""
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, path: str | Path) -> "DashboardConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "DashboardConfig":
        """Create config from dictionary."""
        config = cls()

        if "http" in data:
            http = data["http"] or {}
            config.http = HttpSettings(
                timeout=http.get("timeout", config.http.timeout),
                user_agent=http.get("user_agent", config.http.user_agent),
                headers=dict(http.get("headers") or {}),
            )

        # Sources may be plain URLs or {"url": ...} mappings
        config.sources = []
        for source in data.get("sources") or []:
            url = source.get("url") if isinstance(source, dict) else source
            if url:
                config.sources.append(str(url))

        config.files = [str(p) for p in data.get("files") or []]

        config.refresh_interval = data.get("refresh_interval", config.refresh_interval)
        config.auto_refresh = bool(data.get("auto_refresh", config.auto_refresh))
        config.filter_text = data.get("filter", config.filter_text) or ""
        config.log_level = data.get("log_level", config.log_level)

        config.apply_env()
        return config

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        """Create config from environment variables."""
        config = cls()
        config.sources = _split_env("METRICDECK_SOURCES")
        config.files = _split_env("METRICDECK_FILES")
        config.apply_env()
        return config

    def apply_env(self):
        """Let environment variables override scalar settings."""
        if os.environ.get("METRICDECK_INTERVAL"):
            self.refresh_interval = os.environ["METRICDECK_INTERVAL"]
        if os.environ.get("METRICDECK_AUTO_REFRESH"):
            self.auto_refresh = os.environ["METRICDECK_AUTO_REFRESH"].lower() in ("1", "true", "yes", "on")
        if os.environ.get("METRICDECK_LOG_LEVEL"):
            self.log_level = os.environ["METRICDECK_LOG_LEVEL"]
        if os.environ.get("METRICDECK_TIMEOUT"):
            self.http.timeout = float(os.environ["METRICDECK_TIMEOUT"])


def _split_env(name: str) -> list[str]:
    raw = os.environ.get(name, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def load_config(config_path: Optional[str] = None) -> DashboardConfig:
    """Load configuration from file or environment."""
    # Try config file first
    if config_path and Path(config_path).exists():
        return DashboardConfig.from_file(config_path)

    # Try default locations
    default_paths = [
        Path("metricdeck.yaml"),
        Path("metricdeck.yml"),
        Path.home() / ".metricdeck" / "config.yaml",
    ]

    for path in default_paths:
        if path.exists():
            return DashboardConfig.from_file(path)

    # Fall back to environment
    return DashboardConfig.from_env()
