import pytest
from pydantic import ValidationError

from academic_scheduler.core.config import Settings


def test_log_level_is_normalized():
    settings = Settings(log_level=" debug ", _env_file=None)
    assert settings.log_level == "DEBUG"


def test_invalid_settings_are_rejected():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty", _env_file=None)
    with pytest.raises(ValidationError):
        Settings(bulk_max_entries=0, _env_file=None)


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("BULK_MAX_ENTRIES", "25")
    monkeypatch.setenv("SEED_TIME_SLOTS_ON_STARTUP", "false")

    settings = Settings(_env_file=None)

    assert settings.bulk_max_entries == 25
    assert settings.seed_time_slots_on_startup is False
    assert settings.api_prefix == "/api"
