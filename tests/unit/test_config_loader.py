from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from bumptrack.config.loader import (
    API_URL_ENV,
    DEFAULT_API_URL,
    ConfigError,
    default_config,
    load_config,
)


def _base_config_dict() -> dict:
    return {
        "config_version": "test-001",
        "api": {"base_url": "https://api.example.test/", "timeout_ms": 2500},
        "auth": {"store_path": "creds.json"},
        "timers": {"tick_interval_ms": 500, "pressure_ramp_seconds": 30},
        "kick": {"default_period_hours": 3},
    }


def _write_config(tmp_path: Path, data: dict) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_path


def test_load_config_success(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(API_URL_ENV, raising=False)
    cfg = load_config(_write_config(tmp_path, _base_config_dict()))

    assert cfg.config_version == "test-001"
    assert cfg.api.base_url == "https://api.example.test"
    assert cfg.api.timeout_ms == 2500
    assert cfg.auth.store_path == Path("creds.json")
    assert cfg.timers.tick_interval_ms == 500
    assert cfg.timers.pressure_ramp_seconds == 30
    assert cfg.kick.default_period_hours == 3
    assert cfg.source is not None


def test_optional_sections_fall_back_to_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(API_URL_ENV, raising=False)
    cfg = load_config(_write_config(tmp_path, {"config_version": "minimal"}))

    assert cfg.api.base_url == DEFAULT_API_URL
    assert cfg.api.timeout_ms == 5000
    assert cfg.timers.tick_interval_ms == 1000
    assert cfg.timers.pressure_ramp_seconds == 20
    assert cfg.kick.default_period_hours == 2


def test_base_url_comes_from_environment_when_omitted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(API_URL_ENV, "http://10.0.0.5:7000/")
    cfg = default_config()

    assert cfg.api.base_url == "http://10.0.0.5:7000"
    assert cfg.source is None


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


def test_missing_version_raises(tmp_path: Path) -> None:
    data = _base_config_dict()
    data.pop("config_version")
    with pytest.raises(ConfigError) as exc:
        load_config(_write_config(tmp_path, data))
    assert "config_version" in str(exc.value)


def test_non_http_base_url_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(API_URL_ENV, raising=False)
    data = _base_config_dict()
    data["api"]["base_url"] = "ftp://example.test"
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, data))


@pytest.mark.parametrize("hours", [0, 25])
def test_default_period_out_of_range_rejected(tmp_path: Path, hours: int) -> None:
    data = _base_config_dict()
    data["kick"]["default_period_hours"] = hours
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, data))


def test_tick_interval_below_minimum_rejected(tmp_path: Path) -> None:
    data = _base_config_dict()
    data["timers"]["tick_interval_ms"] = 50
    with pytest.raises(ConfigError) as exc:
        load_config(_write_config(tmp_path, data))
    assert "tick_interval_ms" in str(exc.value)


def test_boolean_integer_rejected(tmp_path: Path) -> None:
    data = _base_config_dict()
    data["api"]["timeout_ms"] = True
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, data))


def test_section_must_be_mapping(tmp_path: Path) -> None:
    data = _base_config_dict()
    data["timers"] = [1, 2]
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, data))


def test_json_config_supported(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"config_version": "json-1", "kick": {"default_period_hours": 4}}', encoding="utf-8")
    cfg = load_config(path)
    assert cfg.kick.default_period_hours == 4


def test_example_config_is_valid(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(API_URL_ENV, raising=False)
    example = Path(__file__).resolve().parents[2] / "config" / "example.yaml"
    cfg = load_config(example)
    assert cfg.kick.default_period_hours == 2
    assert cfg.api.base_url == "http://localhost:7000"


def test_environment_overrides_configured_base_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(API_URL_ENV, "https://staging.example.test")
    cfg = load_config(_write_config(tmp_path, _base_config_dict()))

    assert cfg.api.base_url == "https://staging.example.test"


def test_environment_overrides_example_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(API_URL_ENV, "http://10.0.0.5:7000")
    example = Path(__file__).resolve().parents[2] / "config" / "example.yaml"

    assert load_config(example).api.base_url == "http://10.0.0.5:7000"
