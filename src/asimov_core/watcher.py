"""
Engine facade: wires the components together and runs the two activities

- the one-shot initial scan on a background thread
- the long-lived watchdog monitor
"""

import logging
import threading
from typing import Optional

from .config import WatchConfig
from .evaluator import PathEvaluator
from .exclusion import ExclusionApplier, ExclusionAttributeProbe
from .ignore_paths import IgnorePathMatcher
from .scanner import DirectoryScanner, ScanResult

logger = logging.getLogger("asimov-watcher")


class AsimovWatcher:
    """Watches a directory tree and excludes dependency directories"""

    def __init__(self, config: WatchConfig,
                 probe: Optional[ExclusionAttributeProbe] = None):
        self.config = config

        self.ignore_matcher = IgnorePathMatcher(config.watch_root, config.ignore_dirs)
        self.probe = probe or ExclusionAttributeProbe()
        self.applier = ExclusionApplier(self.probe, tmutil_path=config.tmutil_path)
        self.evaluator = PathEvaluator(
            config.watch_root,
            config.rules,
            self.ignore_matcher,
            self.probe,
            self.applier,
        )
        self.scanner = DirectoryScanner(
            config.watch_root,
            self.evaluator,
            self.probe,
            self.ignore_matcher,
        )

        # Deferred: src.watchdog_monitor imports from this package
        from src.watchdog_monitor import WatchdogMonitor
        self.monitor = WatchdogMonitor(config.watch_root, self.evaluator,
                                       latency=config.latency)

        self._scan_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self.last_scan: Optional[ScanResult] = None

    def _run_initial_scan(self):
        logger.info("Starting initial scan...")
        try:
            self.last_scan = self.scanner.scan()
        except Exception as e:
            logger.error(f"Initial scan failed: {e}", exc_info=True)
            return
        logger.info(
            f"Initial scan finished: {self.last_scan.directories_visited} directories, "
            f"{self.last_scan.files_evaluated} files, "
            f"{self.last_scan.pruned_excluded} excluded and "
            f"{self.last_scan.pruned_ignored} ignored subtrees pruned"
        )

    def start(self, initial_scan: bool = True):
        """
        Start scanning and watching.

        Raises:
            WatchStartError: If the event subscription cannot be started
        """
        logger.info(f"Asimov watcher started on {self.config.watch_root}")
        logger.info(f"Rules: {self.config.rules}")
        if self.ignore_matcher.prefixes:
            logger.info(f"Ignoring directories: {', '.join(self.ignore_matcher.prefixes)}")

        self._stop_event.clear()

        if initial_scan:
            self._scan_thread = threading.Thread(
                target=self._run_initial_scan, name="asimov-initial-scan", daemon=True
            )
            self._scan_thread.start()

        self.monitor.start()

    def wait_for_initial_scan(self, timeout: Optional[float] = None) -> bool:
        """Block until the initial scan ends; False on timeout"""
        if self._scan_thread is None:
            return True
        self._scan_thread.join(timeout)
        return not self._scan_thread.is_alive()

    def run_forever(self):
        """Start, then block until stop() or Ctrl+C"""
        self.start()
        try:
            while not self._stop_event.wait(1):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            if self.monitor.is_running():
                self.monitor.stop()

    def stop(self):
        self._stop_event.set()
        if self.monitor.is_running():
            self.monitor.stop()
