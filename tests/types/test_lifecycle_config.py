"""Tests for LifecycleConfig environment overrides."""

from easycontainers.types import LifecycleConfig


def test_defaults(monkeypatch):
    for var in (
        "EASYCONTAINERS_STEP_TIMEOUT_SEC",
        "EASYCONTAINERS_SETTLE_DELAY_SEC",
        "EASYCONTAINERS_SWEEP_ON_START",
        "EASYCONTAINERS_SEED_BASE_DIR",
    ):
        monkeypatch.delenv(var, raising=False)

    config = LifecycleConfig.from_env()

    assert config.step_timeout_sec == 60
    assert config.poll_interval_sec == 1.0
    assert config.settle_delay_sec == 3.0
    assert config.port_retry_count == 10
    assert config.sweep_on_start is True
    assert config.seed_base_dir is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("EASYCONTAINERS_STEP_TIMEOUT_SEC", "120")
    monkeypatch.setenv("EASYCONTAINERS_SETTLE_DELAY_SEC", "0.5")
    monkeypatch.setenv("EASYCONTAINERS_PORT_RETRY_COUNT", "3")
    monkeypatch.setenv("EASYCONTAINERS_SWEEP_ON_START", "false")
    monkeypatch.setenv("EASYCONTAINERS_SEED_BASE_DIR", "/srv/fixtures")

    config = LifecycleConfig.from_env()

    assert config.step_timeout_sec == 120
    assert config.settle_delay_sec == 0.5
    assert config.port_retry_count == 3
    assert config.sweep_on_start is False
    assert config.seed_base_dir == "/srv/fixtures"


def test_invalid_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("EASYCONTAINERS_STEP_TIMEOUT_SEC", "soon")
    monkeypatch.setenv("EASYCONTAINERS_PORT_RETRY_COUNT", "many")

    config = LifecycleConfig.from_env()

    assert config.step_timeout_sec == 60
    assert config.port_retry_count == 10
