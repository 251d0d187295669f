from __future__ import annotations

import json
import logging
import sys

import pytest

from repograde.config import DEFAULT_ALLOWED_ORIGINS, load_settings
from repograde.logging_config import JSONFormatter, setup_logging

ENV_VARS = (
    "GITHUB_TOKEN", "GEMINI_API_KEY", "GEMINI_MODEL", "AI_TIMEOUT_SECONDS", "GITHUB_TIMEOUT_SECONDS",
    "DATABASE_URL", "CACHE_TTL_SECONDS", "ANALYSIS_FRESHNESS_HOURS", "RATE_LIMIT", "ALLOWED_ORIGINS",
    "ENVIRONMENT", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Unset every setting and return an empty .env path to load from."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return env_file


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_defaults(clean_env) -> None:
    settings = load_settings(str(clean_env))

    assert settings.github_token is None
    assert settings.gemini_api_key is None
    assert settings.database_url == "sqlite:///./repograde.db"
    assert settings.analysis_freshness_hours == 24
    assert settings.rate_limit == "10/minute"
    assert settings.allowed_origins == DEFAULT_ALLOWED_ORIGINS
    assert settings.environment == "development"


def test_environment_overrides(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_token")
    monkeypatch.setenv("AI_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("RATE_LIMIT", "3/minute")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings(str(clean_env))

    assert settings.github_token == "ghp_token"
    assert settings.ai_timeout_seconds == 2.5
    assert settings.rate_limit == "3/minute"
    assert settings.allowed_origins == ["https://a.example", "https://b.example"]
    assert settings.environment == "production"
    assert settings.log_level == "DEBUG"


def test_empty_token_means_anonymous(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "")

    assert load_settings(str(clean_env)).github_token is None


def test_dotenv_file_is_loaded(clean_env, monkeypatch) -> None:
    clean_env.write_text("GEMINI_API_KEY=from-dotenv\nANALYSIS_FRESHNESS_HOURS=6\n")
    # Register the variables so monkeypatch removes what load_dotenv sets
    for name in ("GEMINI_API_KEY", "ANALYSIS_FRESHNESS_HOURS"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    settings = load_settings(str(clean_env))

    assert settings.gemini_api_key == "from-dotenv"
    assert settings.analysis_freshness_hours == 6


def test_json_formatter() -> None:
    record = logging.LogRecord(
        "repograde.engine.aggregator", logging.WARNING, __file__, 42, "scored %s", ("octo/demo",), None,
    )

    entry = json.loads(JSONFormatter().format(record))

    assert entry["severity"] == "WARNING"
    assert entry["logger"] == "repograde.engine.aggregator"
    assert entry["message"] == "scored octo/demo"
    assert entry["line"] == 42
    assert "exception" not in entry


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("repograde", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    entry = json.loads(JSONFormatter().format(record))

    assert "RuntimeError: boom" in entry["exception"]


def test_setup_logging_production_uses_json(restore_root_logger) -> None:
    setup_logging("production", "warning")

    root = restore_root_logger
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)


def test_setup_logging_development_is_plain(restore_root_logger) -> None:
    setup_logging("development", "DEBUG")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert not isinstance(root.handlers[0].formatter, JSONFormatter)
