"""
Tests for settings loading.
"""

import pytest

from customs_tracker.core.exceptions import ConfigurationError
from customs_tracker.utils.config import TrackerSettings, load_settings


def test_defaults():
    settings = load_settings()

    assert settings.port == 3001
    assert settings.database_url == "postgresql://localhost/customs_tracker"
    assert settings.cors_origins == ["http://localhost:5173", "http://localhost:3000"]
    assert not settings.assistant_enabled


def test_yaml_then_environment_then_overrides(tmp_path, monkeypatch):
    config_file = tmp_path / "tracker.yaml"
    config_file.write_text(
        "port: 4000\n"
        "log_level: debug\n"
        "database_url: postgresql://yaml/db\n"
        "auth_url: https://auth.example.com\n"
    )
    monkeypatch.setenv("CUSTOMS_TRACKER_PORT", "5000")
    monkeypatch.setenv("CUSTOMS_TRACKER_NLP_SERVICE_URL", "https://nlp.example.com")
    monkeypatch.setenv("CUSTOMS_TRACKER_NLP_SERVICE_API_KEY", "key")
    monkeypatch.setenv("UNRELATED", "ignored")

    settings = load_settings(config_file, database_url="postgresql://cli/db")

    assert settings.port == 5000
    assert settings.log_level == "DEBUG"
    assert settings.auth_url == "https://auth.example.com"
    assert settings.database_url == "postgresql://cli/db"
    assert settings.assistant_enabled


def test_cors_origins_from_comma_separated_environment(monkeypatch):
    monkeypatch.setenv("CUSTOMS_TRACKER_CORS_ORIGINS", "https://a.example.com, https://b.example.com,")

    settings = load_settings()

    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]


def test_cors_origins_from_yaml_list(tmp_path):
    config_file = tmp_path / "tracker.yaml"
    config_file.write_text("cors_origins:\n  - https://c.example.com\n")

    assert load_settings(config_file).cors_origins == ["https://c.example.com"]


def test_empty_yaml_file_uses_defaults(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")

    assert load_settings(config_file).port == 3001


def test_none_overrides_are_ignored(monkeypatch):
    monkeypatch.setenv("CUSTOMS_TRACKER_LOG_LEVEL", "warning")

    settings = load_settings(log_level=None)

    assert settings.log_level == "WARNING"


@pytest.mark.parametrize("name,value", [
    ("CUSTOMS_TRACKER_PORT", "not-a-port"),
    ("CUSTOMS_TRACKER_PORT", "70000"),
    ("CUSTOMS_TRACKER_LOG_LEVEL", "loud"),
])
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings()

    assert exc_info.value.http_status == 500


def test_invalid_yaml_value(tmp_path):
    config_file = tmp_path / "tracker.yaml"
    config_file.write_text("pool_size: 0\n")

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(config_file)

    assert exc_info.value.details == {"config_key": "pool_size"}


def test_missing_and_malformed_files(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_settings(bad)

    broken = tmp_path / "broken.yaml"
    broken.write_text("port: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_settings(broken)


def test_require():
    settings = TrackerSettings(auth_url="https://auth.example.com")

    settings.require("auth_url")
    with pytest.raises(ConfigurationError) as exc_info:
        settings.require("auth_url", "auth_service_key")

    assert exc_info.value.details == {"config_key": "auth_service_key"}
    assert "CUSTOMS_TRACKER_AUTH_SERVICE_KEY" in exc_info.value.message
