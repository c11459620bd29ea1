"""
Dashboard configuration loaded from config/dashboard.yaml.
The two dashboard variants are the same pipeline with a different theme:
refresh interval plus styling.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)

ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = ROOT / "config" / "dashboard.yaml"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ThemeConfig:
    name: str
    title: str
    refresh_seconds: int
    accent: str = "#22d3ee"
    background: str = "#020617"
    surface: str = "#0f172a"
    login_color: str = "#22c55e"
    registration_color: str = "#38bdf8"
    palette: Tuple[str, ...] = ("#22d3ee", "#a855f7", "#38bdf8", "#34d399", "#f472b6", "#f59e0b")


@dataclass(frozen=True)
class DashboardConfig:
    endpoint: str
    timeout: float = 10
    max_retries: int = 2
    backoff_factor: float = 0.5
    fallback_payload: Path = ROOT / "data" / "dashboard-payload-example.json"
    theme: str = "aurora"
    themes: Dict[str, ThemeConfig] = field(default_factory=dict)

    @property
    def active_theme(self) -> ThemeConfig:
        return self.themes[self.theme]


def _parse_theme(name: str, raw: Dict[str, Any]) -> ThemeConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"Theme '{name}' must be a mapping")
    try:
        refresh = int(raw["refresh_seconds"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Theme '{name}' needs an integer refresh_seconds") from e
    if refresh <= 0:
        raise ConfigError(f"Theme '{name}' refresh_seconds must be positive")

    options = {k: raw[k] for k in ("accent", "background", "surface", "login_color", "registration_color") if k in raw}
    if "palette" in raw:
        options["palette"] = tuple(raw["palette"])
    return ThemeConfig(name=name, title=str(raw.get("title", name)), refresh_seconds=refresh, **options)


def load_config(path: Optional[Union[str, Path]] = None) -> DashboardConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    source = raw.get("source", {})
    endpoint = source.get("endpoint")
    if not endpoint:
        raise ConfigError("source.endpoint is required")

    themes = {name: _parse_theme(name, theme) for name, theme in (raw.get("themes") or {}).items()}
    theme = raw.get("theme", "aurora")
    if theme not in themes:
        raise ConfigError(f"Unknown theme '{theme}' (available: {', '.join(themes) or 'none'})")

    fallback = Path(source.get("fallback_payload", "data/dashboard-payload-example.json"))
    if not fallback.is_absolute():
        fallback = ROOT / fallback

    config = DashboardConfig(
        endpoint=endpoint,
        timeout=float(source.get("timeout", 10)),
        max_retries=int(source.get("max_retries", 2)),
        backoff_factor=float(source.get("backoff_factor", 0.5)),
        fallback_payload=fallback,
        theme=theme,
        themes=themes,
    )
    logger.info(f"Loaded config from {config_path} (theme={theme}, refresh={config.active_theme.refresh_seconds}s)")
    return config
