"""Configuration for the folder watcher service."""

import os
from dataclasses import dataclass


@dataclass
class WatcherConfig:
    """
    Configuration options for the folder watcher.
    
    Attributes:
        host: Interface the WebSocket server binds to
        port: Port the WebSocket server listens on
        debounce_ms: Milliseconds a path must stay quiet before its change is reported
        poll_interval_ms: Bounded wait of the event delivery loop
        recursive: Whether to watch directories recursively
        join_timeout_s: Seconds to wait for observer and loop threads on teardown
    """
    host: str = "127.0.0.1"
    port: int = 9847
    debounce_ms: int = 500
    poll_interval_ms: int = 100
    recursive: bool = True
    join_timeout_s: float = 5.0

    def __post_init__(self):
        if self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must not be negative: {self.debounce_ms}")
        if self.poll_interval_ms <= 0:
            raise ValueError(f"poll_interval_ms must be positive: {self.poll_interval_ms}")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000.0

    @classmethod
    def from_env(cls) -> "WatcherConfig":
        """
        Build a configuration from FOLDER_WATCHER_* environment variables.
        
        Unset variables keep their defaults.
        """
        defaults = cls()
        return cls(
            host=os.environ.get("FOLDER_WATCHER_HOST", defaults.host),
            port=int(os.environ.get("FOLDER_WATCHER_PORT", defaults.port)),
            debounce_ms=int(os.environ.get("FOLDER_WATCHER_DEBOUNCE_MS", defaults.debounce_ms)),
        )
