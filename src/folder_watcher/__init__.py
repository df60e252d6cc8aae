"""
Folder Watcher Package

A local WebSocket service that watches media folders and streams
file and directory changes to a connected client.

Features:
- Named watches added and removed at runtime
- Debounced change notifications re-checked against the file system
- Extension-based media filtering, hidden entries skipped
- Initial scan of existing content on every new watch
- Independent watches and event queue per connection
"""

from .models import (
    CommandType,
    EventType,
    Command,
    WatchInfo,
    ChangeEvent,
    ReadyEvent,
    WatchListEvent,
    ErrorEvent,
    event_from_dict,
)

from .config import WatcherConfig

from .exceptions import (
    WatcherError,
    ProtocolError,
    WatchError,
    WatchAlreadyExistsError,
    WatchNotFoundError,
    WatchPathNotFoundError,
    WatchPathNotADirectoryError,
    SubscriptionError,
    TransportError,
    TransportClosedError,
)

from .filters import MediaCategory, classify, is_media_file, is_hidden
from .protocol import encode_event, decode_event, encode_command, decode_command
from .event_queue import EventQueue
from .fs_watcher import ChangeSubscription, FSEventHandler, PathDebouncer
from .event_processor import EventPipeline
from .watch_registry import Watch, WatchRegistry
from .connection import (
    ConnectionCoordinator,
    ConnectionState,
    Frame,
    FrameType,
    Transport,
)


__all__ = [
    # Models
    "CommandType",
    "EventType",
    "Command",
    "WatchInfo",
    "ChangeEvent",
    "ReadyEvent",
    "WatchListEvent",
    "ErrorEvent",
    "event_from_dict",
    # Config
    "WatcherConfig",
    # Exceptions
    "WatcherError",
    "ProtocolError",
    "WatchError",
    "WatchAlreadyExistsError",
    "WatchNotFoundError",
    "WatchPathNotFoundError",
    "WatchPathNotADirectoryError",
    "SubscriptionError",
    "TransportError",
    "TransportClosedError",
    # Classification
    "MediaCategory",
    "classify",
    "is_media_file",
    "is_hidden",
    # Codec
    "encode_event",
    "decode_event",
    "encode_command",
    "decode_command",
    # Components
    "EventQueue",
    "ChangeSubscription",
    "FSEventHandler",
    "PathDebouncer",
    "EventPipeline",
    "Watch",
    "WatchRegistry",
    # Connection
    "ConnectionCoordinator",
    "ConnectionState",
    "Frame",
    "FrameType",
    "Transport",
]

__version__ = "0.1.0"
