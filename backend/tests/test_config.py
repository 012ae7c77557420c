"""Tests for fail-fast configuration accessors."""

from __future__ import annotations

import pytest

from benchboard.core import config
from benchboard.core.exceptions import ConfigurationError
from benchboard.main import create_app
from fakes import FakeMatcher


def test_database_url_is_required(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ConfigurationError):
        config.get_database_url()


def test_gemini_key_aliases(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_GENAI_API_KEY", raising=False)
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    assert config.get_gemini_api_key() == "test-key"


def test_gemini_key_is_required(monkeypatch):
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "GOOGLE_GENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ConfigurationError):
        config.get_gemini_api_key()


def test_integer_settings(monkeypatch):
    monkeypatch.delenv("BENCHBOARD_BATCH_SIZE", raising=False)
    assert config.get_batch_size() == 100
    monkeypatch.setenv("BENCHBOARD_BATCH_SIZE", "250")
    assert config.get_batch_size() == 250
    monkeypatch.setenv("BENCHBOARD_BATCH_SIZE", "lots")
    with pytest.raises(ConfigurationError):
        config.get_batch_size()
    monkeypatch.setenv("BENCHBOARD_DB_POOL_SIZE", "0")
    with pytest.raises(ConfigurationError):
        config.get_pool_size()


def test_allowed_origins_merge(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://bench.example.com, ")
    origins = config.get_allowed_origins()
    assert "https://bench.example.com" in origins
    assert "http://localhost:5173" in origins


def test_create_app_fails_without_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ConfigurationError):
        create_app(matcher=FakeMatcher(), batch_size=100)
