"""Turns debounced change signals and directory scans into domain events."""

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from .filters import is_hidden, is_media_file
from .models import ChangeEvent, ErrorEvent, Event, EventType

logger = logging.getLogger(__name__)


class EventPipeline:
    """
    Classifies changes under one watch root.
    
    The kind of each change is re-derived from the current state of the
    file system, because one debounced signal may stand for several raw
    operations of which only the outcome is observable. A file created
    and deleted within one window therefore yields nothing.
    
    Events are handed to ``sink`` together with the pipeline itself so the
    receiver can drop them if this pipeline's watch has been removed. The
    sink returns False in that case.
    """

    def __init__(
        self,
        watch_id: str,
        root: Path,
        sink: Callable[["EventPipeline", List[Event]], bool],
    ):
        self.watch_id = watch_id
        self.root = root
        self._sink = sink

    def relative_path(self, path: Path) -> str:
        """
        Path relative to the watch root.
        
        The root itself maps to an empty string; paths outside the root
        fall back to their absolute form.
        """
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            return str(path)
        return "" if relative == Path(".") else str(relative)

    def _change(self, event_type: EventType, path: Path) -> ChangeEvent:
        return ChangeEvent(
            event_type=event_type,
            watch_id=self.watch_id,
            path=str(path),
            relative=self.relative_path(path),
        )

    def classify_change(self, path: Path) -> Optional[ChangeEvent]:
        """
        Build the event for one changed path, if any.
        
        Raises:
            OSError: If the path's state cannot be inspected
        """
        if is_hidden(path):
            return None
        
        if path.exists():
            if path.is_dir():
                logger.debug(f"Directory added: {path}")
                return self._change(EventType.DIR_ADDED, path)
            if is_media_file(path):
                logger.debug(f"File added: {path}")
                return self._change(EventType.FILE_ADDED, path)
            return None
        
        if is_media_file(path):
            logger.debug(f"File removed: {path}")
            return self._change(EventType.FILE_REMOVED, path)
        
        logger.debug(f"Directory removed: {path}")
        return self._change(EventType.DIR_REMOVED, path)

    def process_changes(self, paths: Iterable[Path]) -> int:
        """
        Classify a batch of changed paths and deliver the results.
        
        A path that cannot be inspected becomes an error event; the rest
        of the batch is still processed.
        
        Returns:
            Number of events delivered
        """
        events: List[Event] = []
        for path in paths:
            try:
                event = self.classify_change(path)
            except OSError as e:
                logger.warning(f"Cannot inspect {path}: {e}")
                events.append(ErrorEvent(f"Watch error: {e}", watch_id=self.watch_id))
                continue
            if event is not None:
                events.append(event)
        
        if not events:
            return 0
        return len(events) if self._sink(self, events) else 0

    def process_error(self, error: Exception) -> None:
        """Report a change source failure for this watch."""
        logger.error(f"Watch error for '{self.watch_id}': {error}")
        self._sink(self, [ErrorEvent(f"Watch error: {error}", watch_id=self.watch_id)])

    def scan(self) -> int:
        """
        Report the existing contents of the tree as added entries.
        
        Depth-first; each directory is reported before its contents.
        Hidden entries are skipped and hidden directories not descended.
        Symlinked directories are reported but not followed. Stops early
        once the watch has been removed.
        
        Returns:
            Number of events delivered
        """
        logger.info(f"Scanning existing files in '{self.root}'")
        count = 0
        for event in self._walk(self.root):
            if not self._sink(self, [event]):
                logger.debug(f"Scan of '{self.root}' stopped, watch '{self.watch_id}' removed")
                break
            count += 1
        return count

    def _walk(self, directory: Path) -> Iterator[Event]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.error(f"Error scanning directory {directory}: {e}")
            yield ErrorEvent(f"Watch error: {e}", watch_id=self.watch_id)
            return
        
        for entry in entries:
            if is_hidden(entry.name):
                continue
            
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            
            if is_dir:
                yield self._change(EventType.DIR_ADDED, path)
                if not entry.is_symlink():
                    yield from self._walk(path)
            elif is_media_file(path):
                yield self._change(EventType.FILE_ADDED, path)
