"""
Settings tests: explicit options, environment fallback and defaults.
"""

import pytest
from pydantic import ValidationError as SettingsValidationError

from usesend_transport.config import DEFAULT_API_URL, Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "USESEND_API_KEY",
        "USESEND_API_URL",
        "USESEND_TIMEOUT",
        "USESEND_FETCH_TIMEOUT",
        "USESEND_MAX_WORKERS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_explicit_options_are_used():
    settings = Settings.from_options(api_key="key", api_url="https://self.hosted/")
    assert settings.api_key == "key"
    assert settings.api_url == "https://self.hosted"
    assert settings.emails_url == "https://self.hosted/api/v1/emails"


def test_environment_fallback(monkeypatch):
    monkeypatch.setenv("USESEND_API_KEY", "env-key")
    monkeypatch.setenv("USESEND_API_URL", "https://env.example")
    monkeypatch.setenv("USESEND_MAX_WORKERS", "2")
    settings = Settings.from_options(api_key=None, api_url=None)
    assert settings.api_key == "env-key"
    assert settings.api_url == "https://env.example"
    assert settings.max_workers == 2


def test_explicit_option_beats_environment(monkeypatch):
    monkeypatch.setenv("USESEND_API_KEY", "env-key")
    assert Settings.from_options(api_key="explicit").api_key == "explicit"


def test_defaults(monkeypatch):
    settings = Settings.from_options(api_key="key")
    assert settings.api_url == DEFAULT_API_URL
    assert settings.request_timeout == 30.0
    assert settings.fetch_timeout == 30.0
    assert settings.max_workers == 4
    assert settings.log_level == "INFO"


def test_empty_api_url_means_default(monkeypatch):
    monkeypatch.setenv("USESEND_API_URL", "  ")
    assert Settings.from_options(api_key="key").api_url == DEFAULT_API_URL


def test_missing_api_key_fails(monkeypatch):
    monkeypatch.chdir("/")
    with pytest.raises(SettingsValidationError, match="USESEND_API_KEY"):
        Settings.from_options()


def test_unknown_option_is_rejected():
    with pytest.raises(TypeError, match="Unknown transport option"):
        Settings.from_options(api_key="key", colour="blue")


def test_settings_are_immutable():
    settings = Settings.from_options(api_key="key")
    with pytest.raises(SettingsValidationError):
        settings.api_key = "other"
