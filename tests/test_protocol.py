"""Tests for the JSON frame codec."""

import json

import pytest

from folder_watcher.exceptions import ProtocolError
from folder_watcher.models import (
    ChangeEvent,
    Command,
    CommandType,
    ErrorEvent,
    EventType,
    ReadyEvent,
    WatchInfo,
    WatchListEvent,
)
from folder_watcher.protocol import decode_command, decode_event, encode_command, encode_event


COMMANDS = [
    Command.add_watch("/Volumes/Media/Footage", "watch-1"),
    Command.remove_watch("watch-1"),
    Command.list_watches(),
    Command.shutdown(),
]

EVENTS = [
    ChangeEvent(EventType.FILE_ADDED, "w", "/m/a.mov", "a.mov"),
    ChangeEvent(EventType.DIR_ADDED, "w", "/m/day1", "day1"),
    ChangeEvent(EventType.FILE_REMOVED, "w", "/m/day1/b.wav", "day1/b.wav"),
    ChangeEvent(EventType.DIR_REMOVED, "w", "/m/day1", "day1"),
    ReadyEvent("w"),
    WatchListEvent((WatchInfo("w", "/m"),)),
    WatchListEvent(),
    ErrorEvent("Path does not exist: /nope", watch_id="w"),
    ErrorEvent("Invalid command: expected value"),
]


class TestCommandCodec:
    """Tests for command encoding and decoding."""

    @pytest.mark.parametrize("command", COMMANDS, ids=lambda c: c.command_type.value)
    def test_round_trip(self, command):
        assert decode_command(encode_command(command)) == command

    def test_decode_wire_format(self):
        command = decode_command('{"cmd":"ADD_WATCH","path":"/test/path","id":"watch-1"}')
        assert command.command_type == CommandType.ADD_WATCH
        assert command.path == "/test/path"
        assert command.watch_id == "watch-1"

    def test_encode_uses_tag(self):
        data = json.loads(encode_command(Command.add_watch("/test/path", "watch-1")))
        assert data["cmd"] == "ADD_WATCH"

    @pytest.mark.parametrize("text", [
        "not json",
        "[]",
        '"ADD_WATCH"',
        '{"cmd":"ADD_WATCH","id":"a"}',
        '{"cmd":"REMOVE_WATCH","id":5}',
        '{"cmd":"UNKNOWN"}',
        "{}",
    ])
    def test_decode_invalid(self, text):
        with pytest.raises(ProtocolError, match="^Invalid command: "):
            decode_command(text)


    def test_decode_deeply_nested(self):
        text = "[" * 100000 + "]" * 100000
        
        with pytest.raises(ProtocolError, match="^Invalid command: "):
            decode_command(text)


class TestEventCodec:
    """Tests for event encoding and decoding."""

    @pytest.mark.parametrize("event", EVENTS, ids=lambda e: e.event_type.value)
    def test_round_trip(self, event):
        assert decode_event(encode_event(event)) == event

    def test_error_field_presence(self):
        assert "watch_id" not in encode_event(ErrorEvent("boom"))
        assert '"watch_id": "w"' in encode_event(ErrorEvent("boom", watch_id="w"))

    def test_decode_invalid(self):
        with pytest.raises(ProtocolError):
            decode_event('{"event":"READY"}')
