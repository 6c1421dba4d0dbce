#!/usr/bin/env python3
"""
Watchdog monitor for live sentinel/target detection

This module subscribes to file system notifications for the watch root and
feeds every created or renamed path to the PathEvaluator.
"""

import logging
import threading
from pathlib import Path
from typing import List, Optional, Tuple, Union

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from src.asimov_core.constants import DEFAULT_LATENCY
from src.asimov_core.evaluator import EventFlags, PathEvaluator

logger = logging.getLogger("watchdog-monitor")

EventBatch = List[Tuple[str, EventFlags]]

_TYPE_FLAGS = {
    EVENT_TYPE_CREATED: EventFlags.ITEM_CREATED,
    EVENT_TYPE_DELETED: EventFlags.ITEM_REMOVED,
    EVENT_TYPE_MODIFIED: EventFlags.ITEM_MODIFIED,
    EVENT_TYPE_MOVED: EventFlags.ITEM_RENAMED,
}


class WatchStartError(RuntimeError):
    """The event subscription could not be started"""


def _decode(path: Union[str, bytes]) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="replace")
    return path


def event_to_batch(event: FileSystemEvent) -> EventBatch:
    """
    Translate a watchdog event into (path, flags) pairs

    Moves produce two pairs, the vacated source and the destination,
    both flagged as renamed.
    """
    flags = _TYPE_FLAGS.get(event.event_type)
    if flags is None:
        return []

    flags |= EventFlags.ITEM_IS_DIR if event.is_directory else EventFlags.ITEM_IS_FILE

    batch = [(_decode(event.src_path), flags)]
    if event.event_type == EVENT_TYPE_MOVED:
        dest_path = getattr(event, 'dest_path', None)
        if dest_path:
            batch.append((_decode(dest_path), flags))
    return batch


class ExclusionEventHandler(FileSystemEventHandler):
    """
    Hands every notification to the evaluator

    Watchdog calls this from a single observer thread. Nothing raised
    here may escape back into that thread, or delivery stops for good.
    """

    def __init__(self, evaluator: PathEvaluator):
        super().__init__()
        self.evaluator = evaluator

    def dispatch_batch(self, batch: EventBatch):
        """Evaluate each (path, flags) pair in delivery order"""
        for path, flags in batch:
            try:
                self.evaluator.evaluate(path, parent_verified=False, event_flags=flags)
            except Exception as e:
                logger.error(f"Error handling event for {path}: {e}", exc_info=True)

    def _handle(self, event: FileSystemEvent):
        try:
            self.dispatch_batch(event_to_batch(event))
        except Exception as e:
            logger.error(f"Error handling file event {_decode(event.src_path)}: {e}",
                         exc_info=True)

    def on_created(self, event: FileSystemEvent):
        self._handle(event)

    def on_moved(self, event: FileSystemEvent):
        self._handle(event)

    def on_modified(self, event: FileSystemEvent):
        self._handle(event)

    def on_deleted(self, event: FileSystemEvent):
        self._handle(event)


class WatchdogMonitor:
    """
    Owns the observer and the handler for one watch root
    """

    def __init__(self, watch_root: Union[str, Path],
                 evaluator: PathEvaluator,
                 latency: float = DEFAULT_LATENCY):
        """
        Initialize the watchdog monitor

        Args:
            watch_root: Directory to watch recursively
            evaluator: PathEvaluator receiving every event
            latency: Coalescing window handed to the observer (seconds)
        """
        self.watch_root = Path(watch_root)
        self.evaluator = evaluator
        self.latency = latency

        self._observer: Optional[Observer] = None
        self._handler: Optional[ExclusionEventHandler] = None
        self._lock = threading.Lock()

    def start(self):
        """Subscribe to notifications; raises WatchStartError on failure"""
        if self._observer is not None:
            logger.warning("Monitor already running")
            return

        if not self.watch_root.is_dir():
            raise WatchStartError(f"Watch root is not a directory: {self.watch_root}")

        handler = ExclusionEventHandler(self.evaluator)
        observer = Observer(timeout=self.latency)

        try:
            observer.schedule(handler, str(self.watch_root), recursive=True)
            observer.start()
        except Exception as e:
            raise WatchStartError(f"Failed to start event stream for {self.watch_root}: {e}") from e

        with self._lock:
            self._handler = handler
            self._observer = observer
        logger.info(f"Watching directory: {self.watch_root}")

    def stop(self):
        """Stop the observer and wait for its thread"""
        with self._lock:
            observer, self._observer = self._observer, None
            self._handler = None

        if observer is None:
            logger.warning("Monitor not running")
            return

        observer.stop()
        observer.join()

        logger.info("Watchdog monitor stopped")

    def is_running(self) -> bool:
        """Check if monitor is running"""
        observer = self._observer
        return observer is not None and observer.is_alive()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
