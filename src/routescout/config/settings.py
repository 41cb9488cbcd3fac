# src/routescout/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/routescout/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `ROUTESCOUT_CONFIG_PATH`
- a small whitelist of environment variables (log level, User-Agent, history path)

Design rule:
- Tuning knobs (radii, delays, deadlines, caps) live in YAML, not hard-coded in enrichment logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from routescout.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `routescout.config`."""
    text = resources.files("routescout.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "RouteScout"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"
    user_agent: str = "routescout/0.1.0 (+https://local)"


class ServiceEndpoint(BaseModel):
    base_url: str


class GeocodingSettings(ServiceEndpoint):
    search_limit: int = Field(5, ge=1, le=50)
    accept_language: str = "en"


class ServicesSettings(BaseModel):
    routing: ServiceEndpoint
    overpass: ServiceEndpoint
    geocoding: GeocodingSettings
    elevation: ServiceEndpoint


class PoiEnrichmentSettings(BaseModel):
    checkpoint_segments: int = Field(10, ge=1)
    radius_m: int = Field(1000, gt=0)
    per_checkpoint_limit: int = Field(20, ge=1)
    inter_query_delay_seconds: float = Field(1.0, ge=0)
    deadline_seconds: float = Field(15.0, ge=0)
    max_results: int = Field(100, ge=1)
    dedup_epsilon_deg: float = Field(1e-5, gt=0)


class ElevationEnrichmentSettings(BaseModel):
    max_samples: int = Field(100, ge=1)


class EnrichmentSettings(BaseModel):
    pois: PoiEnrichmentSettings = Field(default_factory=PoiEnrichmentSettings)
    elevation: ElevationEnrichmentSettings = Field(default_factory=ElevationEnrichmentSettings)


class HistorySettings(BaseModel):
    path: str = ".routescout/history.json"
    max_entries: int = Field(50, ge=1)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    services: ServicesSettings
    enrichment: EnrichmentSettings = Field(default_factory=EnrichmentSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small; service URLs are changed via YAML.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("ROUTESCOUT_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    user_agent = os.getenv("ROUTESCOUT_USER_AGENT")
    if user_agent:
        data.setdefault("app", {})["user_agent"] = user_agent

    history_path = os.getenv("ROUTESCOUT_HISTORY_PATH")
    if history_path:
        data.setdefault("history", {})["path"] = history_path

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("ROUTESCOUT_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
