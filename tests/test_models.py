"""Tests for models module."""

import pytest

from folder_watcher.models import (
    ChangeEvent,
    Command,
    CommandType,
    ErrorEvent,
    EventType,
    ReadyEvent,
    WatchInfo,
    WatchListEvent,
    event_from_dict,
)


class TestCommand:
    """Tests for Command class."""

    def test_add_watch_to_dict(self):
        command = Command.add_watch("/test/path", "watch-1")
        assert command.to_dict() == {"cmd": "ADD_WATCH", "path": "/test/path", "id": "watch-1"}

    def test_remove_watch_to_dict(self):
        assert Command.remove_watch("watch-1").to_dict() == {"cmd": "REMOVE_WATCH", "id": "watch-1"}

    def test_argumentless_commands(self):
        assert Command.list_watches().to_dict() == {"cmd": "LIST_WATCHES"}
        assert Command.shutdown().to_dict() == {"cmd": "SHUTDOWN"}

    def test_from_dict(self):
        command = Command.from_dict({"cmd": "ADD_WATCH", "path": "/p", "id": "a"})
        assert command.command_type == CommandType.ADD_WATCH
        assert command.path == "/p"
        assert command.watch_id == "a"

    def test_from_dict_ignores_unknown_keys(self):
        command = Command.from_dict({"cmd": "LIST_WATCHES", "extra": 1})
        assert command == Command.list_watches()

    def test_from_dict_missing_field(self):
        with pytest.raises(ValueError, match="missing field `id`"):
            Command.from_dict({"cmd": "REMOVE_WATCH"})

    def test_from_dict_unknown_tag(self):
        with pytest.raises(ValueError, match="unknown variant `PAUSE`"):
            Command.from_dict({"cmd": "PAUSE"})

    def test_from_dict_missing_tag(self):
        with pytest.raises(ValueError, match="missing field `cmd`"):
            Command.from_dict({"id": "a"})

    def test_add_watch_requires_path(self):
        with pytest.raises(ValueError):
            Command(CommandType.ADD_WATCH, watch_id="a")

    def test_immutable(self):
        command = Command.shutdown()
        with pytest.raises(AttributeError):
            command.watch_id = "x"


class TestEvents:
    """Tests for event classes."""

    def test_change_event_to_dict(self):
        event = ChangeEvent(EventType.FILE_ADDED, "watch-1", "/full/path/file.mp4", "file.mp4")
        assert event.to_dict() == {
            "event": "FILE_ADDED",
            "watch_id": "watch-1",
            "path": "/full/path/file.mp4",
            "relative": "file.mp4",
        }

    def test_change_event_rejects_other_types(self):
        with pytest.raises(ValueError):
            ChangeEvent(EventType.READY, "w", "/p", "p")

    def test_ready_to_dict(self):
        assert ReadyEvent("w").to_dict() == {"event": "READY", "watch_id": "w"}

    def test_watch_list_to_dict(self):
        event = WatchListEvent((WatchInfo("a", "/a"), WatchInfo("b", "/b")))
        assert event.to_dict() == {
            "event": "WATCH_LIST",
            "watches": [{"id": "a", "path": "/a"}, {"id": "b", "path": "/b"}],
        }

    def test_error_without_watch_id_omits_key(self):
        data = ErrorEvent("Something went wrong").to_dict()
        assert data == {"event": "ERROR", "message": "Something went wrong"}
        assert "watch_id" not in data

    def test_error_with_watch_id(self):
        data = ErrorEvent("Permission denied", watch_id="watch-1").to_dict()
        assert data["watch_id"] == "watch-1"

    def test_event_from_dict_dispatches(self):
        assert isinstance(event_from_dict({"event": "DIR_REMOVED", "watch_id": "w", "path": "/p", "relative": "p"}), ChangeEvent)
        assert isinstance(event_from_dict({"event": "READY", "watch_id": "w"}), ReadyEvent)
        assert isinstance(event_from_dict({"event": "WATCH_LIST", "watches": []}), WatchListEvent)
        assert isinstance(event_from_dict({"event": "ERROR", "message": "m"}), ErrorEvent)

    def test_event_from_dict_unknown(self):
        with pytest.raises(ValueError):
            event_from_dict({"event": "FILE_MOVED"})
