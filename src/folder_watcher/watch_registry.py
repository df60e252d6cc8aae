"""Thread-safe management of the named watches of one connection."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import WatcherConfig
from .event_processor import EventPipeline
from .event_queue import EventQueue
from .exceptions import (
    SubscriptionError,
    WatchAlreadyExistsError,
    WatchNotFoundError,
    WatchPathNotADirectoryError,
    WatchPathNotFoundError,
)
from .fs_watcher import ChangeSubscription
from .models import Event, ReadyEvent, WatchInfo

logger = logging.getLogger(__name__)


SubscriptionFactory = Callable[[Path, EventPipeline, WatcherConfig], ChangeSubscription]


def default_subscription_factory(
    root: Path,
    pipeline: EventPipeline,
    config: WatcherConfig,
) -> ChangeSubscription:
    """Create a watchdog-backed subscription feeding the given pipeline."""
    return ChangeSubscription(
        root,
        on_changes=pipeline.process_changes,
        on_error=pipeline.process_error,
        debounce_ms=config.debounce_ms,
        recursive=config.recursive,
    )


@dataclass
class Watch:
    """An active watch and the subscription it exclusively owns."""
    id: str
    root_path: Path
    subscription: ChangeSubscription
    pipeline: EventPipeline

    def info(self) -> WatchInfo:
        return WatchInfo(id=self.id, path=str(self.root_path))


class WatchRegistry:
    """
    Thread-safe registry of active watches, keyed by client-supplied id.
    
    Every read and mutation holds one lock. Pipelines deliver their events
    through the registry, which drops them unless the delivering pipeline
    still belongs to the registered watch for its id. Together with the
    subscription being stopped inside the same lock as the map removal,
    this guarantees nothing from a removed watch reaches the queue after
    ``remove`` returns. Initial scans and thread joins happen outside
    the lock.
    """

    def __init__(
        self,
        event_queue: EventQueue,
        config: Optional[WatcherConfig] = None,
        subscription_factory: Optional[SubscriptionFactory] = None,
    ):
        """
        Initialize the registry.
        
        Args:
            event_queue: Queue receiving all events of this registry's watches
            config: Watcher configuration
            subscription_factory: Creates the change subscription for a watch
        """
        self.config = config or WatcherConfig()
        self._queue = event_queue
        self._subscription_factory = subscription_factory or default_subscription_factory
        self._watches: Dict[str, Watch] = {}
        self._lock = threading.RLock()

    def add(self, watch_id: str, root_path) -> Watch:
        """
        Start watching a directory tree under the given id.
        
        Queues a Ready event, then reports the existing contents of the
        tree before returning.
        
        Args:
            watch_id: Client-supplied identifier
            root_path: Directory to watch
            
        Returns:
            The new watch
            
        Raises:
            WatchAlreadyExistsError: If the id is already in use
            WatchPathNotFoundError: If the path does not exist
            WatchPathNotADirectoryError: If the path is not a directory
            SubscriptionError: If the change source cannot start
        """
        if not str(root_path):
            raise WatchPathNotFoundError(f"Path does not exist: {root_path}")
        # Resolved so that paths reported by the backend share its prefix.
        root = Path(root_path).resolve()
        
        with self._lock:
            if watch_id in self._watches:
                raise WatchAlreadyExistsError(f"Watch with id '{watch_id}' already exists")
            if not root.exists():
                raise WatchPathNotFoundError(f"Path does not exist: {root_path}")
            if not root.is_dir():
                raise WatchPathNotADirectoryError(f"Path is not a directory: {root_path}")
            
            pipeline = EventPipeline(watch_id, root, self._deliver)
            subscription = self._subscription_factory(root, pipeline, self.config)
            try:
                subscription.start()
            except SubscriptionError as e:
                raise SubscriptionError(f"Failed to start watching: {e}") from e
            
            watch = Watch(id=watch_id, root_path=root, subscription=subscription, pipeline=pipeline)
            self._watches[watch_id] = watch
            # Queued under the lock: live deliveries for this watch wait on
            # the same lock, so Ready always comes first.
            self._queue.put(ReadyEvent(watch_id))
        
        logger.info(f"Started watching '{root}' with id '{watch_id}'")
        pipeline.scan()
        return watch

    def remove(self, watch_id: str) -> None:
        """
        Stop watching and forget a watch.
        
        Raises:
            WatchNotFoundError: If no watch has the given id
        """
        with self._lock:
            watch = self._watches.pop(watch_id, None)
            if watch is None:
                raise WatchNotFoundError(f"Watch with id '{watch_id}' not found")
            watch.subscription.stop()
        
        watch.subscription.join(timeout=self.config.join_timeout_s)
        logger.info(f"Removed watch '{watch_id}'")

    def list(self) -> List[WatchInfo]:
        """
        Snapshot of the active watches.
        
        Returns:
            Id and root path of each watch, in the order they were added
        """
        with self._lock:
            return [watch.info() for watch in self._watches.values()]

    def get(self, watch_id: str) -> Optional[Watch]:
        with self._lock:
            return self._watches.get(watch_id)

    def clear(self) -> int:
        """
        Remove all watches, releasing their subscriptions.
        
        Returns:
            Number of watches removed
        """
        with self._lock:
            watches = list(self._watches.values())
            self._watches.clear()
            for watch in watches:
                watch.subscription.stop()
        
        for watch in watches:
            watch.subscription.join(timeout=self.config.join_timeout_s)
        
        if watches:
            logger.info(f"Cleared {len(watches)} watch(es)")
        return len(watches)

    def _deliver(self, pipeline: EventPipeline, events: List[Event]) -> bool:
        """Queue a pipeline's events if its watch is still registered."""
        with self._lock:
            watch = self._watches.get(pipeline.watch_id)
            if watch is None or watch.pipeline is not pipeline:
                logger.debug(f"Dropping {len(events)} event(s) for removed watch '{pipeline.watch_id}'")
                return False
            self._queue.put_many(events)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._watches)

    def __contains__(self, watch_id: str) -> bool:
        with self._lock:
            return watch_id in self._watches
