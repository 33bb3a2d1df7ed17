"""Config loader with schema validation for the kick and contraction counters."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

API_URL_ENV = "BUMPTRACK_API_URL"
DEFAULT_API_URL = "http://localhost:7000"
DEFAULT_STORE_PATH = "~/.bumptrack/credentials.json"
MIN_PERIOD_HOURS = 1
MAX_PERIOD_HOURS = 24


class ConfigError(ValueError):
    """Raised when a configuration file fails validation."""


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    timeout_ms: int = 5000


@dataclass(frozen=True)
class AuthConfig:
    store_path: Path


@dataclass(frozen=True)
class TimerConfig:
    tick_interval_ms: int = 1000
    pressure_ramp_seconds: int = 20


@dataclass(frozen=True)
class KickConfig:
    default_period_hours: int = 2


@dataclass(frozen=True)
class Config:
    source: Optional[Path]
    config_version: str
    api: ApiConfig
    auth: AuthConfig
    timers: TimerConfig
    kick: KickConfig


def default_config() -> Config:
    """Built-in configuration used when no file is available."""
    return _parse_config({"config_version": "builtin"}, None)


def load_config(path: str | Path) -> Config:
    """Load and validate a YAML/JSON config file."""
    source = Path(path)
    if not source.exists():
        raise ConfigError(f"Config file not found: {source}")

    data = _deserialize(source)
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping")
    return _parse_config(data, source)


def _deserialize(source: Path) -> Any:
    text = source.read_text(encoding="utf-8")
    suffix = source.suffix.lower()
    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _parse_config(data: Dict[str, Any], source: Optional[Path]) -> Config:
    config_version = _require_str(data, "config_version")

    api_section = _optional_dict(data, "api")
    base_url = os.environ.get(API_URL_ENV) or api_section.get("base_url") or DEFAULT_API_URL
    if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
        raise ConfigError("api.base_url must be an http(s) URL")
    api = ApiConfig(
        base_url=base_url.rstrip("/"),
        timeout_ms=_coerce_int(api_section.get("timeout_ms", 5000), "api.timeout_ms", minimum=1),
    )

    auth_section = _optional_dict(data, "auth")
    store_path = auth_section.get("store_path", DEFAULT_STORE_PATH)
    if not isinstance(store_path, str) or not store_path.strip():
        raise ConfigError("auth.store_path must be a non-empty string")
    auth = AuthConfig(store_path=Path(store_path).expanduser())

    timers_section = _optional_dict(data, "timers")
    timers = TimerConfig(
        tick_interval_ms=_coerce_int(
            timers_section.get("tick_interval_ms", 1000), "timers.tick_interval_ms", minimum=100
        ),
        pressure_ramp_seconds=_coerce_int(
            timers_section.get("pressure_ramp_seconds", 20), "timers.pressure_ramp_seconds", minimum=1
        ),
    )

    kick_section = _optional_dict(data, "kick")
    kick = KickConfig(
        default_period_hours=_coerce_int(
            kick_section.get("default_period_hours", 2), "kick.default_period_hours", minimum=MIN_PERIOD_HOURS
        ),
    )
    if kick.default_period_hours > MAX_PERIOD_HOURS:
        raise ConfigError(f"kick.default_period_hours must be <= {MAX_PERIOD_HOURS}")

    return Config(
        source=source,
        config_version=config_version,
        api=api,
        auth=auth,
        timers=timers,
        kick=kick,
    )


def _optional_dict(obj: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = obj.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} block must be a mapping if provided")
    return value


def _require_str(obj: Dict[str, Any], key: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string")
    return value


def _coerce_int(value: Any, field: str, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"'{field}' must be an integer, not boolean")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{field}' must be an integer") from exc
    if minimum is not None and parsed < minimum:
        raise ConfigError(f"'{field}' must be >= {minimum}")
    return parsed


__all__ = [
    "API_URL_ENV",
    "ApiConfig",
    "AuthConfig",
    "Config",
    "ConfigError",
    "DEFAULT_API_URL",
    "KickConfig",
    "MAX_PERIOD_HOURS",
    "MIN_PERIOD_HOURS",
    "TimerConfig",
    "default_config",
    "load_config",
]
