"""
One-shot top-down scan of the watch root.

Runs once at startup, on a background thread, so live events are handled
while the tree is still being walked.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .constants import MAX_SCAN_DEPTH
from .evaluator import PathEvaluator
from .exclusion import ExclusionAttributeProbe
from .ignore_paths import IgnorePathMatcher

logger = logging.getLogger("directory-scanner")


@dataclass
class ScanResult:
    """Counters collected during a scan"""
    directories_visited: int = 0
    files_evaluated: int = 0
    pruned_excluded: int = 0
    pruned_ignored: int = 0
    errors: int = 0


class DirectoryScanner:
    """
    Depth-first walk that prunes excluded and ignored subtrees.

    Uses an explicit stack, so tree depth never touches the interpreter's
    recursion limit; subtrees deeper than ``max_depth`` are skipped.
    """

    def __init__(self,
                 watch_root: Union[str, Path],
                 evaluator: PathEvaluator,
                 probe: ExclusionAttributeProbe,
                 ignore_matcher: IgnorePathMatcher,
                 max_depth: int = MAX_SCAN_DEPTH):
        self.watch_root = Path(watch_root)
        self.evaluator = evaluator
        self.probe = probe
        self.ignore_matcher = ignore_matcher
        self.max_depth = max_depth

    def scan(self, root: Optional[Union[str, Path]] = None) -> ScanResult:
        result = ScanResult()
        stack: List[Tuple[Path, int]] = [(Path(root or self.watch_root), 0)]

        while stack:
            directory, depth = stack.pop()

            # Nothing under an excluded or ignored directory can change that
            if self.probe.is_excluded(directory):
                result.pruned_excluded += 1
                continue
            if self.ignore_matcher.should_ignore(directory):
                result.pruned_ignored += 1
                continue

            result.directories_visited += 1
            self.evaluator.evaluate(directory, parent_verified=True,
                                    skip_exclusion_check=True)

            try:
                with os.scandir(directory) as it:
                    entries = list(it)
            except OSError as e:
                logger.warning(f"Cannot read {directory}: {e}")
                result.errors += 1
                continue

            subdirs: List[Path] = []
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(Path(entry.path))
                    elif entry.is_file():
                        result.files_evaluated += 1
                        self.evaluator.evaluate(Path(entry.path), parent_verified=True)
                except OSError as e:
                    logger.debug(f"Skipping {entry.path}: {e}")
                    result.errors += 1

            if subdirs and depth + 1 > self.max_depth:
                logger.warning(f"Maximum scan depth reached, skipping below {directory}")
                continue

            # Reversed so the stack pops subdirectories in listing order
            stack.extend((subdir, depth + 1) for subdir in reversed(subdirs))

        return result
