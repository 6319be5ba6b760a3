"""Tests for settings, user env persistence and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import AppSettings, write_user_env_vars
from core.logging_setup import configure_logging


def test_settings_defaults() -> None:
    settings = AppSettings(_env_file=None)

    assert settings.base_url is None
    assert settings.use_auth is False
    assert settings.default_client_key == "default"
    assert settings.http_timeout_seconds == 20.0


def test_settings_read_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APIKIT_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("APIKIT_USE_AUTH", "true")
    monkeypatch.setenv("APIKIT_HTTP_TIMEOUT_SECONDS", "3.5")

    settings = AppSettings(_env_file=None)

    assert settings.base_url == "https://api.example.com"
    assert settings.use_auth is True
    assert settings.http_timeout_seconds == 3.5


def test_settings_reject_non_positive_timeout() -> None:
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, http_timeout_seconds=0)


def test_write_user_env_vars_merges_existing(tmp_path: Path) -> None:
    env_path = tmp_path / "apikit" / ".env"
    write_user_env_vars({"APIKIT_BASE_URL": "https://old.example.com", "APIKIT_LOG_LEVEL": "INFO"}, env_path)

    write_user_env_vars({"APIKIT_BASE_URL": "https://new.example.com"}, env_path)

    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert "APIKIT_BASE_URL=https://new.example.com" in lines
    assert "APIKIT_LOG_LEVEL=INFO" in lines

    settings = AppSettings(_env_file=env_path)
    assert settings.base_url == "https://new.example.com"


def test_configure_logging_is_idempotent() -> None:
    root = logging.getLogger()
    before = len(root.handlers)

    configure_logging("debug")
    configure_logging("INFO")

    rich_handlers = [h for h in root.handlers if h.get_name() == "apikit-rich"]
    assert len(rich_handlers) == 1
    assert rich_handlers[0].level == logging.INFO
    assert len(root.handlers) <= before + 1
