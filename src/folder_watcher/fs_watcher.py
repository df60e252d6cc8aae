"""Debounced file system change subscriptions using the watchdog library."""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)

from .exceptions import SubscriptionError

logger = logging.getLogger(__name__)


class FSEventHandler(FileSystemEventHandler):
    """Handler that forwards the paths touched by watchdog events."""

    def __init__(self, callback: Callable[[Path], None]):
        super().__init__()
        self.callback = callback

    def _emit(self, raw_path) -> None:
        self.callback(Path(os.fsdecode(raw_path)))

    def on_created(self, event: FileSystemEvent):
        self._emit(event.src_path)

    def on_deleted(self, event: FileSystemEvent):
        self._emit(event.src_path)

    def on_modified(self, event: FileSystemEvent):
        # Directory modifications only mirror changes to their children.
        if event.is_directory:
            return
        self._emit(event.src_path)

    def on_moved(self, event: FileSystemMovedEvent):
        self._emit(event.src_path)
        self._emit(event.dest_path)


class PathDebouncer:
    """
    Coalesces rapid changes to the same path.
    
    A path is released once no new change has been seen for it
    during the debounce window.
    """

    def __init__(self, debounce_ms: int = 500):
        """
        Initialize the debouncer.
        
        Args:
            debounce_ms: Debounce window in milliseconds
        """
        self.debounce_ms = debounce_ms
        self._pending: Dict[Path, float] = {}
        self._lock = threading.Lock()

    def add(self, path: Path, timestamp: Optional[float] = None) -> None:
        """Record a change to a path, restarting its window."""
        if timestamp is None:
            timestamp = time.monotonic()
        with self._lock:
            self._pending.pop(path, None)
            self._pending[path] = timestamp

    def flush(self, current_time: Optional[float] = None) -> List[Path]:
        """
        Release paths whose window has elapsed.
        
        Args:
            current_time: Monotonic timestamp to compare against
            
        Returns:
            Paths ready to report, in order of their latest change
        """
        if current_time is None:
            current_time = time.monotonic()
        window_sec = self.debounce_ms / 1000.0
        
        with self._lock:
            ready = [
                path for path, seen in self._pending.items()
                if (current_time - seen) >= window_sec
            ]
            for path in ready:
                del self._pending[path]
        
        return ready

    def flush_all(self) -> List[Path]:
        """Release all pending paths regardless of time."""
        with self._lock:
            paths = list(self._pending)
            self._pending.clear()
            return paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


class ChangeSubscription:
    """
    Recursive, debounced change notifications for one directory tree.
    
    A watchdog observer feeds raw events into a PathDebouncer; a flush
    thread ticking at a quarter of the window hands quiet paths to
    ``on_changes`` as one batch. Failures while handling a batch, or the
    observer dying underneath us, are reported through ``on_error``.
    """

    def __init__(
        self,
        root: Path,
        on_changes: Callable[[List[Path]], None],
        on_error: Callable[[Exception], None],
        debounce_ms: int = 500,
        recursive: bool = True,
    ):
        self.root = root
        self.recursive = recursive
        self._on_changes = on_changes
        self._on_error = on_error
        self._debouncer = PathDebouncer(debounce_ms)
        self._tick = max(debounce_ms / 4000.0, 0.01)
        self._observer: Optional[Observer] = None
        self._flush_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    def start(self) -> None:
        """
        Start watching the root directory.
        
        Raises:
            SubscriptionError: If the observer cannot be scheduled or started
        """
        with self._lock:
            if self._observer is not None:
                raise SubscriptionError(f"Already watching {self.root}")
            
            observer = Observer()
            handler = FSEventHandler(self._debouncer.add)
            try:
                observer.schedule(handler, str(self.root), recursive=self.recursive)
                observer.start()
            except OSError as e:
                raise SubscriptionError(str(e)) from e
            
            self._observer = observer
            self._flush_thread = threading.Thread(
                target=self._flush_loop,
                name=f"ChangeFlush[{self.root}]",
                daemon=True,
            )
            self._flush_thread.start()

    def stop(self) -> None:
        """
        Signal the observer and flush thread to stop without waiting.
        
        No new batch is dispatched once this returns; a batch already
        being dispatched may still finish. Safe to call repeatedly.
        """
        with self._lock:
            if self._stop_event.is_set():
                return
            self._stop_event.set()
            observer = self._observer
        
        if observer is not None:
            observer.stop()
        self._debouncer.flush_all()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the observer and flush threads to exit."""
        current = threading.current_thread()
        if self._observer is not None and self._observer is not current:
            self._observer.join(timeout=timeout)
        if self._flush_thread is not None and self._flush_thread is not current:
            self._flush_thread.join(timeout=timeout)

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop and wait for all threads."""
        self.stop()
        self.join(timeout)

    @property
    def is_active(self) -> bool:
        return self._observer is not None and not self._stop_event.is_set()

    def _flush_loop(self) -> None:
        """Worker loop that releases debounced paths."""
        logger.debug(f"Flush loop started for {self.root}, tick={self._tick}s")
        observer_failed = False
        
        while not self._stop_event.wait(timeout=self._tick):
            paths = self._debouncer.flush()
            if paths and not self._stop_event.is_set():
                self._dispatch(paths)
            
            if not observer_failed and not self._observer.is_alive() and not self._stop_event.is_set():
                observer_failed = True
                logger.error(f"Observer for {self.root} stopped unexpectedly")
                self._on_error(RuntimeError("observer stopped unexpectedly"))

    def _dispatch(self, paths: List[Path]) -> None:
        try:
            self._on_changes(paths)
        except Exception as e:
            logger.exception(f"Error handling changes under {self.root}")
            self._on_error(e)
