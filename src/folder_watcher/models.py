"""Data models for commands and events exchanged with clients."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class CommandType(Enum):
    """Types of commands a client can send."""
    ADD_WATCH = "ADD_WATCH"
    REMOVE_WATCH = "REMOVE_WATCH"
    LIST_WATCHES = "LIST_WATCHES"
    SHUTDOWN = "SHUTDOWN"


class EventType(Enum):
    """Types of events delivered to a client."""
    FILE_ADDED = "FILE_ADDED"
    DIR_ADDED = "DIR_ADDED"
    FILE_REMOVED = "FILE_REMOVED"
    DIR_REMOVED = "DIR_REMOVED"
    READY = "READY"
    WATCH_LIST = "WATCH_LIST"
    ERROR = "ERROR"


CHANGE_EVENT_TYPES = frozenset({
    EventType.FILE_ADDED,
    EventType.DIR_ADDED,
    EventType.FILE_REMOVED,
    EventType.DIR_REMOVED,
})


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"missing field `{key}`")
    return value


@dataclass(frozen=True)
class Command:
    """
    A single instruction received from a client.
    
    Attributes:
        command_type: The type of command
        watch_id: Watch identifier (ADD_WATCH and REMOVE_WATCH)
        path: Directory to watch (ADD_WATCH only)
    """
    command_type: CommandType
    watch_id: Optional[str] = None
    path: Optional[str] = None

    def __post_init__(self):
        if self.command_type in (CommandType.ADD_WATCH, CommandType.REMOVE_WATCH) and self.watch_id is None:
            raise ValueError(f"{self.command_type.value} requires a watch id")
        if self.command_type == CommandType.ADD_WATCH and self.path is None:
            raise ValueError("ADD_WATCH requires a path")

    @classmethod
    def add_watch(cls, path: str, watch_id: str) -> "Command":
        return cls(CommandType.ADD_WATCH, watch_id=watch_id, path=path)

    @classmethod
    def remove_watch(cls, watch_id: str) -> "Command":
        return cls(CommandType.REMOVE_WATCH, watch_id=watch_id)

    @classmethod
    def list_watches(cls) -> "Command":
        return cls(CommandType.LIST_WATCHES)

    @classmethod
    def shutdown(cls) -> "Command":
        return cls(CommandType.SHUTDOWN)

    def to_dict(self) -> dict:
        """Convert to the wire dictionary."""
        data = {"cmd": self.command_type.value}
        if self.command_type == CommandType.ADD_WATCH:
            data["path"] = self.path
        if self.watch_id is not None:
            data["id"] = self.watch_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Command":
        """
        Create from a wire dictionary.
        
        Raises:
            ValueError: If the tag is unknown or a required field is missing
        """
        tag = data.get("cmd")
        if not isinstance(tag, str):
            raise ValueError("missing field `cmd`")
        try:
            command_type = CommandType(tag)
        except ValueError:
            raise ValueError(f"unknown variant `{tag}`") from None
        
        if command_type == CommandType.ADD_WATCH:
            return cls.add_watch(_require_str(data, "path"), _require_str(data, "id"))
        if command_type == CommandType.REMOVE_WATCH:
            return cls.remove_watch(_require_str(data, "id"))
        return cls(command_type)


@dataclass(frozen=True)
class WatchInfo:
    """Identifier and root path of one active watch."""
    id: str
    path: str

    def to_dict(self) -> dict:
        return {"id": self.id, "path": self.path}

    @classmethod
    def from_dict(cls, data: dict) -> "WatchInfo":
        return cls(id=_require_str(data, "id"), path=_require_str(data, "path"))


@dataclass(frozen=True)
class ChangeEvent:
    """
    A file or directory appeared or disappeared under a watch.
    
    Attributes:
        event_type: One of FILE_ADDED, DIR_ADDED, FILE_REMOVED, DIR_REMOVED
        watch_id: Id of the watch that observed the change
        path: Absolute path of the affected entry
        relative: Path relative to the watch root
    """
    event_type: EventType
    watch_id: str
    path: str
    relative: str

    def __post_init__(self):
        if self.event_type not in CHANGE_EVENT_TYPES:
            raise ValueError(f"not a change event type: {self.event_type}")

    def to_dict(self) -> dict:
        return {
            "event": self.event_type.value,
            "watch_id": self.watch_id,
            "path": self.path,
            "relative": self.relative,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeEvent":
        return cls(
            event_type=EventType(data["event"]),
            watch_id=_require_str(data, "watch_id"),
            path=_require_str(data, "path"),
            relative=_require_str(data, "relative"),
        )


@dataclass(frozen=True)
class ReadyEvent:
    """A watch is registered and its initial scan is about to start."""
    watch_id: str
    event_type: EventType = EventType.READY

    def to_dict(self) -> dict:
        return {"event": self.event_type.value, "watch_id": self.watch_id}

    @classmethod
    def from_dict(cls, data: dict) -> "ReadyEvent":
        return cls(watch_id=_require_str(data, "watch_id"))


@dataclass(frozen=True)
class WatchListEvent:
    """Snapshot of the active watches of a connection."""
    watches: Tuple[WatchInfo, ...] = ()
    event_type: EventType = EventType.WATCH_LIST

    def to_dict(self) -> dict:
        return {
            "event": self.event_type.value,
            "watches": [w.to_dict() for w in self.watches],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WatchListEvent":
        watches = data.get("watches")
        if not isinstance(watches, list):
            raise ValueError("missing field `watches`")
        return cls(watches=tuple(WatchInfo.from_dict(w) for w in watches))


@dataclass(frozen=True)
class ErrorEvent:
    """
    A recoverable error reported to the client.
    
    Attributes:
        message: Human readable description
        watch_id: Watch the error relates to, if any
    """
    message: str
    watch_id: Optional[str] = None
    event_type: EventType = EventType.ERROR

    def to_dict(self) -> dict:
        data = {"event": self.event_type.value, "message": self.message}
        # The key is left out entirely rather than sent as null.
        if self.watch_id is not None:
            data["watch_id"] = self.watch_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ErrorEvent":
        watch_id = data.get("watch_id")
        if watch_id is not None and not isinstance(watch_id, str):
            raise ValueError("invalid field `watch_id`")
        return cls(message=_require_str(data, "message"), watch_id=watch_id)


Event = Union[ChangeEvent, ReadyEvent, WatchListEvent, ErrorEvent]


def event_from_dict(data: dict) -> Event:
    """
    Create any event variant from its wire dictionary.
    
    Raises:
        ValueError: If the tag is unknown or a required field is missing
    """
    tag = data.get("event")
    if not isinstance(tag, str):
        raise ValueError("missing field `event`")
    try:
        event_type = EventType(tag)
    except ValueError:
        raise ValueError(f"unknown variant `{tag}`") from None
    
    if event_type in CHANGE_EVENT_TYPES:
        return ChangeEvent.from_dict(data)
    if event_type == EventType.READY:
        return ReadyEvent.from_dict(data)
    if event_type == EventType.WATCH_LIST:
        return WatchListEvent.from_dict(data)
    return ErrorEvent.from_dict(data)
