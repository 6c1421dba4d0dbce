"""
Per-path rule evaluation shared by the initial scan and live events
"""

import enum
import logging
from pathlib import Path
from typing import Optional, Union

from src.utils.logging_setup import add_trace_to_logger

from .exclusion import ExclusionApplier, ExclusionAttributeProbe
from .ignore_paths import IgnorePathMatcher
from .rules import RuleTable

add_trace_to_logger()
logger = logging.getLogger("path-evaluator")


class EventFlags(enum.IntFlag):
    """Change flags attached to a live file-system notification"""
    NONE = 0
    ITEM_CREATED = 1 << 0
    ITEM_REMOVED = 1 << 1
    ITEM_RENAMED = 1 << 2
    ITEM_MODIFIED = 1 << 3
    ITEM_IS_FILE = 1 << 4
    ITEM_IS_DIR = 1 << 5


class PathEvaluator:
    """
    Decides whether a path triggers a rule and applies the exclusion.

    Holds no mutable state of its own; the scanner thread and the event
    thread may call ``evaluate`` at the same time.
    """

    def __init__(self,
                 watch_root: Union[str, Path],
                 rules: RuleTable,
                 ignore_matcher: IgnorePathMatcher,
                 probe: ExclusionAttributeProbe,
                 applier: ExclusionApplier):
        self.watch_root = Path(watch_root)
        self.rules = rules
        self.ignore_matcher = ignore_matcher
        self.probe = probe
        self.applier = applier

    def evaluate(self,
                 path: Union[str, Path],
                 parent_verified: bool = False,
                 event_flags: Optional[EventFlags] = None,
                 skip_exclusion_check: bool = False) -> None:
        """
        Evaluate a single path.

        Args:
            path: Absolute path of the file or directory
            parent_verified: Caller already knows no ancestor is excluded
            event_flags: Flags of a live notification; None/NONE for scans
            skip_exclusion_check: Caller already ran the ignore/exclusion checks
        """
        path = Path(path)

        if event_flags:
            is_created = bool(event_flags & EventFlags.ITEM_CREATED)
            is_renamed = bool(event_flags & EventFlags.ITEM_RENAMED)

            if not is_created and not is_renamed:
                return

            # Renames are reported for both the vacated source and the destination
            if is_renamed and not path.exists():
                logger.trace(f"Skipping vacated rename source: {path}")
                return

        if not skip_exclusion_check:
            if self.ignore_matcher.should_ignore(path):
                logger.trace(f"Ignored path: {path}")
                return

            if not parent_verified:
                if self.is_ancestor_excluded(path):
                    logger.trace(f"Inside excluded tree: {path}")
                    return
            elif self.probe.is_excluded(path):
                return

        filename = path.name
        parent = path.parent

        for rule in self.rules:
            if filename == rule.sentinel:
                target = parent / rule.target
                if target.exists():
                    logger.debug(f"Sentinel {path} matched target {target}")
                    self.applier.apply(target)
            if filename == rule.target:
                sentinel = parent / rule.sentinel
                if sentinel.exists():
                    logger.debug(f"Target {path} matched sentinel {sentinel}")
                    self.applier.apply(path)

    def is_ancestor_excluded(self, path: Union[str, Path]) -> bool:
        """Walk from path up to the watch root looking for an excluded item"""
        current = Path(path)
        while True:
            if self.probe.is_excluded(current):
                return True
            if current == self.watch_root:
                break
            parent = current.parent
            if parent == current:
                break
            current = parent
        return False
