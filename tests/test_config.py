"""Tests for configuration module."""
import os
from pathlib import Path

import pytest

from src.shared.config import Config


def test_config_paths_exist():
    """Test that config paths are properly initialized."""
    assert isinstance(Config.ROOT_DIR, Path)
    assert isinstance(Config.DATA_DIR, Path)
    assert isinstance(Config.LOGS_DIR, Path)


def test_config_default_values():
    """Test default configuration values."""
    assert Config.STORAGE_BACKEND == os.getenv("STORAGE_BACKEND", "file")
    assert Config.HISTORY_RETENTION_DAYS == int(os.getenv("HISTORY_RETENTION_DAYS", "365"))
    assert Config.REQUEST_TIMEOUT == int(os.getenv("REQUEST_TIMEOUT", "10"))
    assert Config.PRICE_CACHE_TTL == int(os.getenv("PRICE_CACHE_TTL", "3600"))


def test_close_time_parsing(monkeypatch):
    monkeypatch.setattr(Config, "CLOSE_TIME_IST", "23:45")
    assert Config.close_time() == (23, 45)

    monkeypatch.setattr(Config, "CLOSE_TIME_IST", " 9:05 ")
    assert Config.close_time() == (9, 5)


@pytest.mark.parametrize("value", ["2345", "24:00", "12:60", "noon", ""])
def test_close_time_rejects_malformed(monkeypatch, value):
    monkeypatch.setattr(Config, "CLOSE_TIME_IST", value)
    with pytest.raises(ValueError, match="CLOSE_TIME_IST"):
        Config.close_time()


def test_config_validation_unknown_backend(monkeypatch):
    """Test configuration validation fails for an unknown storage backend."""
    monkeypatch.setattr(Config, "STORAGE_BACKEND", "redis")
    with pytest.raises(ValueError, match="STORAGE_BACKEND"):
        Config.validate()


def test_config_validation_retention(monkeypatch):
    monkeypatch.setattr(Config, "STORAGE_BACKEND", "memory")
    monkeypatch.setattr(Config, "CLOSE_TIME_IST", "23:45")
    monkeypatch.setattr(Config, "HISTORY_RETENTION_DAYS", 0)
    with pytest.raises(ValueError, match="HISTORY_RETENTION_DAYS"):
        Config.validate()


def test_config_validation_passes(monkeypatch):
    monkeypatch.setattr(Config, "STORAGE_BACKEND", "file")
    monkeypatch.setattr(Config, "CLOSE_TIME_IST", "23:45")
    monkeypatch.setattr(Config, "HISTORY_RETENTION_DAYS", 365)
    Config.validate()
