"""Tests for the configuration loading.
"""

import os
from unittest.mock import patch

import pytest

from agenda_assistant.core.config import Settings
from agenda_assistant.core.logging_config import build_logging_config


@pytest.fixture
def client_secret(tmp_path):
    path = tmp_path / "client_secret.json"
    path.write_text("{}")
    return path


def test_settings_loading_directly():
    """Test that Settings can be initialized directly with values.

    Bypasses environment variables and .env files.
    """
    settings = Settings(
        environment="testing",
        debug=True,
        OPENAI_API_KEY="sk-test",
        OPENAI_CHAT_MODEL_NAME="gpt-test",
        CALENDAR_TIMEZONE="UTC",
        _env_file=None,
    )

    assert settings.environment == "testing"
    assert settings.debug is True
    assert settings.OPENAI_API_KEY == "sk-test"
    assert settings.OPENAI_CHAT_MODEL_NAME == "gpt-test"
    assert settings.CALENDAR_TIMEZONE == "UTC"


def test_settings_defaults():
    """Defaults apply when neither the environment nor a .env file sets a value."""
    with patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.environment == "development"
    assert settings.DEMO_MODE is None
    assert settings.OPENAI_API_KEY is None
    assert settings.OPENAI_CHAT_MODEL_NAME == "gpt-4o-mini"
    assert settings.CALENDAR_TIMEZONE == "Asia/Jerusalem"
    assert settings.api_port == 8000


def test_settings_from_environment():
    env = {"OPENAI_API_KEY": "sk-env", "DEMO_MODE": "false", "DEMO_LATENCY_SECONDS": "0.5"}
    with patch.dict(os.environ, env, clear=True):
        settings = Settings(_env_file=None)

    assert settings.OPENAI_API_KEY == "sk-env"
    assert settings.DEMO_MODE is False
    assert settings.DEMO_LATENCY_SECONDS == 0.5


def test_google_scopes_are_combined_without_duplicates():
    settings = Settings(
        GOOGLE_CALENDAR_API_SCOPES=["a", "b"],
        GOOGLE_TASKS_API_SCOPES=["b", "c"],
        GOOGLE_PROFILE_SCOPES=["openid"],
        _env_file=None,
    )
    assert settings.google_scopes == ["openid", "a", "b", "c"]


def test_relative_paths_resolve_against_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = Settings(GOOGLE_OAUTH_TOKENS_PATH="data/tokens.json", _env_file=None)
    assert settings.token_path() == tmp_path / "data" / "tokens.json"


# --- Demo mode resolution ---

def test_explicit_demo_mode_wins(client_secret):
    settings = Settings(DEMO_MODE=True, OPENAI_API_KEY="sk", GOOGLE_CLIENT_SECRET_JSON_PATH=str(client_secret),
                        _env_file=None)
    assert settings.resolve_demo_mode() is True

    settings = Settings(DEMO_MODE=False, OPENAI_API_KEY=None, _env_file=None)
    assert settings.resolve_demo_mode() is False


def test_missing_api_key_means_demo(client_secret):
    settings = Settings(OPENAI_API_KEY=None, GOOGLE_CLIENT_SECRET_JSON_PATH=str(client_secret), _env_file=None)
    assert settings.resolve_demo_mode() is True


def test_missing_client_secret_means_demo(tmp_path):
    settings = Settings(OPENAI_API_KEY="sk", GOOGLE_CLIENT_SECRET_JSON_PATH=str(tmp_path / "nope.json"),
                        _env_file=None)
    assert settings.resolve_demo_mode() is True


def test_all_credentials_means_live(client_secret):
    settings = Settings(OPENAI_API_KEY="sk", GOOGLE_CLIENT_SECRET_JSON_PATH=str(client_secret), _env_file=None)
    assert settings.resolve_demo_mode() is False


def test_logging_config_levels():
    config = build_logging_config("debug")
    assert config["handlers"]["console"]["level"] == "DEBUG"
    assert config["loggers"][""]["level"] == "DEBUG"
    assert "googleapiclient" in config["loggers"]
