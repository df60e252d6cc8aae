"""Tests for the outbound event queue."""

import threading
import time

from folder_watcher.event_queue import EventQueue
from folder_watcher.models import ErrorEvent, ReadyEvent


class TestEventQueue:
    """Tests for EventQueue class."""

    def test_fifo_order(self):
        q = EventQueue()
        q.put(ReadyEvent("a"))
        q.put_many([ReadyEvent("b"), ReadyEvent("c")])
        
        assert [q.get(timeout=0.1).watch_id for _ in range(3)] == ["a", "b", "c"]

    def test_get_timeout_returns_none(self):
        q = EventQueue()
        start = time.monotonic()
        assert q.get(timeout=0.05) is None
        assert time.monotonic() - start >= 0.04

    def test_size(self):
        q = EventQueue()
        assert len(q) == 0
        q.put(ErrorEvent("x"))
        assert q.size() == 1

    def test_get_pending(self):
        q = EventQueue()
        q.put_many([ReadyEvent(str(i)) for i in range(5)])
        
        events = q.get_pending(max_count=3)
        
        assert [e.watch_id for e in events] == ["0", "1", "2"]
        assert len(q) == 2

    def test_get_wakes_on_put(self):
        q = EventQueue()
        threading.Timer(0.05, q.put, args=(ReadyEvent("late"),)).start()
        
        event = q.get(timeout=2.0)
        
        assert event == ReadyEvent("late")
