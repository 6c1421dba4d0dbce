"""
Prefix-based pruning of subtrees the watcher never evaluates
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Tuple, Union

logger = logging.getLogger("ignore-paths")


class IgnorePathMatcher:
    """
    Matches paths against absolute, separator-terminated ignore prefixes.

    Both the prefixes and the tested path carry a trailing separator, so
    prefix ``/a/b/`` matches ``/a/b`` and ``/a/b/c`` but never ``/a/bc``.
    """

    def __init__(self, watch_root: Union[str, Path], ignore_dirs: Iterable[str] = ()):
        self.watch_root = Path(watch_root)

        prefixes: List[str] = []
        for ignore_dir in ignore_dirs:
            if not ignore_dir:
                continue
            abs_path = str(self.watch_root / ignore_dir)
            if not abs_path.endswith(os.sep):
                abs_path += os.sep
            prefixes.append(abs_path)

        self._prefixes: Tuple[str, ...] = tuple(prefixes)
        logger.debug(f"Ignore prefixes: {list(self._prefixes)}")

    @property
    def prefixes(self) -> Tuple[str, ...]:
        return self._prefixes

    def should_ignore(self, path: Union[str, Path]) -> bool:
        """True if path lies at or below one of the ignore prefixes"""
        if not self._prefixes:
            return False

        path_str = os.fspath(path)
        if not path_str.endswith(os.sep):
            path_str += os.sep

        return any(path_str.startswith(prefix) for prefix in self._prefixes)
