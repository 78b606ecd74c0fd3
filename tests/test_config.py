"""Tests for configuration loading."""

import pytest

import bluecarbon.config
from bluecarbon.config import Config, get_config, reload_config


@pytest.fixture(autouse=True)
def _reset_config():
    bluecarbon.config._config = None
    yield
    bluecarbon.config._config = None


def test_defaults(monkeypatch):
    monkeypatch.delenv("BLUECARBON_LEDGER_LOG_DELAY_SECONDS", raising=False)
    cfg = Config()
    assert cfg.default_horizon_years == 20
    assert cfg.initial_credibility_score == 100
    assert cfg.ledger_chain_id == 80001
    assert cfg.ledger_log_delay_seconds == 2.0


def test_env_override(monkeypatch):
    monkeypatch.setenv("BLUECARBON_DEFAULT_HORIZON_YEARS", "30")
    assert Config().default_horizon_years == 30


def test_cors_origins_list():
    cfg = Config(cors_origins="http://a.org, http://b.org,")
    assert cfg.cors_origins_list == ["http://a.org", "http://b.org"]


def test_yaml_overlay(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("initial_credibility_score: 90\nrate_limit_per_minute: 5\n")
    cfg = reload_config(path)
    assert cfg.initial_credibility_score == 90
    assert cfg.rate_limit_per_minute == 5
    assert get_config() is cfg


def test_missing_yaml_falls_back(tmp_path):
    cfg = Config.from_yaml(tmp_path / "absent.yaml")
    assert cfg.default_horizon_years == 20


def test_get_config_is_singleton():
    assert get_config() is get_config()


def test_invalid_credibility_rejected():
    with pytest.raises(ValueError):
        Config(initial_credibility_score=150)


def test_yaml_wins_over_env(tmp_path, monkeypatch):
    monkeypatch.setenv("BLUECARBON_RATE_LIMIT_PER_MINUTE", "99")
    monkeypatch.setenv("BLUECARBON_DEFAULT_HORIZON_YEARS", "30")
    path = tmp_path / "config.yaml"
    path.write_text("rate_limit_per_minute: 5\n")
    cfg = Config.from_yaml(path)
    assert cfg.rate_limit_per_minute == 5
    assert cfg.default_horizon_years == 30
