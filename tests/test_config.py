"""
Tests for settings loading.
"""

from scheduler.app.config import Settings
from scheduler.app.services.slots.config import SlotGridConfig, get_grid_config


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.request_timeout == 10.0
    assert settings.tick_interval_seconds == 1.0
    assert settings.default_open_time == "08:00"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SCHEDULER_REQUEST_TIMEOUT", "3.5")
    monkeypatch.setenv("SCHEDULER_API_BASE_URL", "https://booking.example.com/api/")

    settings = Settings(_env_file=None)

    assert settings.request_timeout == 3.5
    assert settings.resolved_api_base_url == "https://booking.example.com/api"


def test_grid_step_and_hold_ignore_environment(monkeypatch):
    monkeypatch.setenv("SCHEDULER_HOLD_MINUTES", "5")
    monkeypatch.setenv("SCHEDULER_SLOT_STEP_MINUTES", "60")
    get_grid_config.cache_clear()
    try:
        config = get_grid_config()
        assert config.slot_step_minutes == 30
        assert config.hold_minutes == 30
        assert config.hold_ms == 30 * 60 * 1000
    finally:
        get_grid_config.cache_clear()


def test_hold_ms():
    assert SlotGridConfig(hold_minutes=15).hold_ms == 15 * 60 * 1000
