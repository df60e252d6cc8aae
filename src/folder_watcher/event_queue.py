"""Unbounded in-memory queue feeding a connection's delivery loop."""

import queue
from typing import List, Optional

from .models import Event


class EventQueue:
    """
    Thread-safe FIFO of outbound events.
    
    Producers (command intake, change callbacks, scans) never block;
    the single consumer waits with a bounded timeout so it can observe
    shutdown promptly.
    """

    def __init__(self):
        self._queue: "queue.Queue[Event]" = queue.Queue()

    def put(self, event: Event) -> None:
        """Append an event."""
        self._queue.put_nowait(event)

    def put_many(self, events: List[Event]) -> None:
        """Append events in order."""
        for event in events:
            self._queue.put_nowait(event)

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        """
        Remove and return the next event.
        
        Args:
            timeout: Seconds to wait; None waits indefinitely
            
        Returns:
            The next event, or None if the timeout expired
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def get_pending(self, max_count: int = 100) -> List[Event]:
        """
        Get pending events without blocking.
        
        Args:
            max_count: Maximum number of events to return
            
        Returns:
            List of pending events, oldest first
        """
        events = []
        while len(events) < max_count:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events

    def size(self) -> int:
        """Approximate number of pending events."""
        return self._queue.qsize()

    def __len__(self) -> int:
        return self.size()
