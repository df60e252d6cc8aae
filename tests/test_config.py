"""Tests for config module."""

import pytest

from folder_watcher.config import WatcherConfig


class TestWatcherConfig:
    """Tests for WatcherConfig class."""

    def test_default_values(self):
        config = WatcherConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 9847
        assert config.debounce_ms == 500
        assert config.poll_interval_ms == 100
        assert config.recursive is True

    def test_custom_values(self):
        config = WatcherConfig(port=10000, debounce_ms=50)
        assert config.port == 10000
        assert config.debounce_ms == 50
        assert config.debounce_seconds == pytest.approx(0.05)

    def test_poll_interval_seconds(self):
        assert WatcherConfig().poll_interval_seconds == pytest.approx(0.1)

    def test_rejects_negative_debounce(self):
        with pytest.raises(ValueError):
            WatcherConfig(debounce_ms=-1)

    def test_rejects_zero_poll_interval(self):
        with pytest.raises(ValueError):
            WatcherConfig(poll_interval_ms=0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("FOLDER_WATCHER_PORT", "9999")
        monkeypatch.setenv("FOLDER_WATCHER_DEBOUNCE_MS", "250")
        monkeypatch.delenv("FOLDER_WATCHER_HOST", raising=False)
        
        config = WatcherConfig.from_env()
        
        assert config.port == 9999
        assert config.debounce_ms == 250
        assert config.host == "127.0.0.1"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("FOLDER_WATCHER_HOST", "FOLDER_WATCHER_PORT", "FOLDER_WATCHER_DEBOUNCE_MS"):
            monkeypatch.delenv(name, raising=False)
        assert WatcherConfig.from_env() == WatcherConfig()
