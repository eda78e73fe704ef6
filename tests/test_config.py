"""Tests for chaos_rpg.config."""

import logging

import pytest

from chaos_rpg.config import _ENV_VARS, DEFAULT_SETTINGS, configure_logging, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Start each test with none of our variables set and an empty cwd.

    Setting before deleting makes monkeypatch remove anything load_dotenv
    writes to os.environ during the test.
    """
    for var in _ENV_VARS:
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)


# ── load_config ──────────────────────────────────────────


def test_defaults():
    config = load_config()
    assert config.scryfall_base_url == "https://api.scryfall.com"
    assert config.scryfall_rate_limit_ms == 100
    assert config.scryfall_timeout == 30.0
    assert config.log_level == "INFO"
    assert config.personality == "default"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SCRYFALL_BASE_URL", "http://localhost:9000")
    monkeypatch.setenv("SCRYFALL_RATE_LIMIT_MS", "250")
    monkeypatch.setenv("SCRYFALL_TIMEOUT", "2.5")
    monkeypatch.setenv("CHAOS_RPG_LOG_LEVEL", "debug")
    monkeypatch.setenv("CHAOS_RPG_PERSONALITY", "chaotic")
    config = load_config()
    assert config.scryfall_base_url == "http://localhost:9000"
    assert config.scryfall_rate_limit_ms == 250
    assert config.scryfall_timeout == 2.5
    assert config.log_level == "DEBUG"
    assert config.personality == "chaotic"


def test_empty_env_value_keeps_default(monkeypatch):
    monkeypatch.setenv("CHAOS_RPG_PERSONALITY", "")
    assert load_config().personality == "default"


def test_env_file(tmp_path):
    env = tmp_path / "custom.env"
    env.write_text("CHAOS_RPG_PERSONALITY=reckless\nSCRYFALL_TIMEOUT=7\n")
    config = load_config(env)
    assert config.personality == "reckless"
    assert config.scryfall_timeout == 7.0


def test_env_file_in_cwd(tmp_path):
    (tmp_path / ".env").write_text("CHAOS_RPG_LOG_LEVEL=warning\n")
    assert load_config().log_level == "WARNING"


def test_environment_wins_over_env_file(monkeypatch, tmp_path):
    env = tmp_path / "custom.env"
    env.write_text("CHAOS_RPG_PERSONALITY=reckless\n")
    monkeypatch.setenv("CHAOS_RPG_PERSONALITY", "cautious")
    assert load_config(env).personality == "cautious"


def test_missing_env_file_is_fine(tmp_path):
    assert load_config(tmp_path / "nope.env").personality == "default"


# ── Logging ──────────────────────────────────────────────


def test_configure_logging_unknown_level(caplog):
    config = load_config().model_copy(update={"log_level": "LOUD"})
    with caplog.at_level(logging.WARNING, logger="chaos_rpg.config"):
        configure_logging(config)
    assert "Unknown log level" in caplog.text


# ── Settings ─────────────────────────────────────────────


def test_default_settings():
    assert DEFAULT_SETTINGS.sound_volume == 50
    assert DEFAULT_SETTINGS.ai_personality == "default"
