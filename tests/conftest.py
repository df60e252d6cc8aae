"""Shared fakes for registry and connection tests."""

import queue
import threading
from pathlib import Path
from typing import List

import pytest

from folder_watcher.connection import Frame, FrameType, Transport
from folder_watcher.exceptions import SubscriptionError, TransportClosedError


class FakeSubscription:
    """Stands in for a watchdog subscription; changes are pushed by hand."""

    def __init__(self, root: Path, pipeline, fail: bool = False):
        self.root = root
        self.pipeline = pipeline
        self.fail = fail
        self.started = False
        self.stopped = False
        self.joined = False

    def start(self):
        if self.fail:
            raise SubscriptionError("inotify watch limit reached")
        self.started = True

    def stop(self):
        self.stopped = True

    def join(self, timeout=None):
        self.joined = True

    def fire(self, paths: List[Path]) -> int:
        """Simulate a debounced batch arriving, unless stopped."""
        if self.stopped:
            return 0
        return self.pipeline.process_changes(paths)


class FakeSubscriptionFactory:
    def __init__(self):
        self.created: List[FakeSubscription] = []
        self.fail = False

    def __call__(self, root, pipeline, config):
        subscription = FakeSubscription(root, pipeline, fail=self.fail)
        self.created.append(subscription)
        return subscription


@pytest.fixture
def subscriptions():
    return FakeSubscriptionFactory()


class FakeTransport(Transport):
    """Queue-backed transport; the test feeds frames and reads what was sent."""

    def __init__(self):
        self.inbound: "queue.Queue[Frame]" = queue.Queue()
        self.sent: List[str] = []
        self.pongs: List[bytes] = []
        self.closed = False
        self.peer_gone = False
        self._lock = threading.Lock()
        self._sent_cond = threading.Condition(self._lock)

    def push_text(self, text: str) -> None:
        self.inbound.put(Frame(FrameType.TEXT, text=text))

    def push(self, frame: Frame) -> None:
        self.inbound.put(frame)

    def receive(self) -> Frame:
        frame = self.inbound.get()
        if frame is None:
            raise TransportClosedError("connection reset")
        return frame

    def send_text(self, text: str) -> None:
        with self._sent_cond:
            if self.peer_gone:
                raise TransportClosedError("peer closed")
            self.sent.append(text)
            self._sent_cond.notify_all()

    def send_pong(self, data: bytes) -> None:
        self.pongs.append(data)

    def close(self) -> None:
        self.closed = True

    def wait_for(self, count: int, timeout: float = 5.0) -> List[str]:
        """Wait until at least ``count`` frames were sent."""
        with self._sent_cond:
            self._sent_cond.wait_for(lambda: len(self.sent) >= count, timeout=timeout)
            return list(self.sent)


@pytest.fixture
def transport():
    return FakeTransport()
