import pytest
from pydantic import ValidationError

from path_tracker.configs import AppSettings, PermissionSettings


def test_defaults():
    settings = AppSettings()

    assert settings.session.follow_delay_s == 5.0
    assert settings.session.reset_path_on_start is True
    assert settings.map.zoom == 18.0
    assert settings.permissions.location_permission in settings.permissions.required


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TRACKER__SESSION__FOLLOW_DELAY_S", "1.5")
    monkeypatch.setenv("TRACKER__SESSION__RESET_PATH_ON_START", "false")
    monkeypatch.setenv("TRACKER__LOGGING__LEVEL", "debug")

    settings = AppSettings()

    assert settings.session.follow_delay_s == 1.5
    assert settings.session.reset_path_on_start is False
    assert settings.logging.level == "DEBUG"


def test_location_permission_must_be_requested():
    with pytest.raises(ValidationError):
        PermissionSettings(required=["POST_NOTIFICATIONS"], location_permission="ACCESS_FINE_LOCATION")


def test_timeouts_must_be_positive(monkeypatch):
    monkeypatch.setenv("TRACKER__SESSION__START_TIMEOUT_S", "0")

    with pytest.raises(ValidationError):
        AppSettings()
