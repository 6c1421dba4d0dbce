"""
Runtime configuration for the watcher.

Values come from explicit arguments first, then environment variables,
then built-in defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from .constants import DEFAULT_LATENCY, TMUTIL_PATH
from .rules import RuleTable

logger = logging.getLogger("watch-config")


@dataclass
class WatchConfig:
    """Configuration for a single watch root"""
    watch_root: Path
    ignore_dirs: List[str] = field(default_factory=list)
    latency: float = DEFAULT_LATENCY
    tmutil_path: str = TMUTIL_PATH
    rules: RuleTable = field(default_factory=RuleTable)

    def __post_init__(self):
        """Normalize and validate configuration values"""
        # Event sources report real paths, so prefixes must be built from one
        self.watch_root = Path(os.path.realpath(os.path.expanduser(str(self.watch_root))))
        self.ignore_dirs = [d for d in self.ignore_dirs if d]
        self.latency = float(self.latency)
        if self.latency < 0:
            raise ValueError(f"latency must be >= 0, got {self.latency}")

    @classmethod
    def from_env(cls,
                 watch_root: Union[str, Path],
                 ignore_dirs: Optional[Sequence[str]] = None,
                 **overrides: Any) -> "WatchConfig":
        """
        Build a config, filling unset values from the environment.

        Environment variables:
            ASIMOV_LATENCY: coalescing window in seconds
            ASIMOV_TMUTIL: path to the tmutil binary
        """
        values = {
            'latency': os.environ.get('ASIMOV_LATENCY', DEFAULT_LATENCY),
            'tmutil_path': os.environ.get('ASIMOV_TMUTIL', TMUTIL_PATH),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            values['latency'] = float(values['latency'])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid latency: {values['latency']!r}")

        config = cls(watch_root=Path(watch_root),
                     ignore_dirs=list(ignore_dirs or []),
                     **values)
        logger.debug(f"Loaded config: {config}")
        return config
