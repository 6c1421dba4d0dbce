"""
Backup/indexing exclusion for target directories.

Exclusion is two separate markers:
- an empty ``.metadata_never_index`` file inside the directory (Spotlight)
- the Time Machine exclusion attribute, set by ``tmutil addexclusion``

Both are only ever added, never removed.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Optional, Union

import xattr

from .constants import (
    EXCLUSION_ATTRIBUTE,
    MARKER_FILENAME,
    TMUTIL_ADD_EXCLUSION,
    TMUTIL_PATH,
)

logger = logging.getLogger("exclusion")

PathLike = Union[str, Path]
AttributeReader = Callable[[str, str], bytes]


class ExclusionAttributeProbe:
    """Checks whether a path already carries the backup exclusion attribute"""

    def __init__(self,
                 attribute_name: str = EXCLUSION_ATTRIBUTE,
                 reader: Optional[AttributeReader] = None):
        """
        Args:
            attribute_name: Extended attribute that marks an excluded item
            reader: Callable ``(path, name) -> bytes`` raising OSError when
                the attribute is absent (defaults to ``xattr.getxattr``)
        """
        self.attribute_name = attribute_name
        self._reader = reader or xattr.getxattr

    def is_excluded(self, path: PathLike) -> bool:
        try:
            value = self._reader(os.fspath(path), self.attribute_name)
        except OSError:
            # Missing attribute, missing path or unsupported filesystem
            return False
        return bool(value)


class ExclusionApplier:
    """
    Idempotently marks a directory as excluded from backup and indexing.

    ``apply`` never raises; every failure is logged and the next
    independent trigger for the same path gets another attempt.
    """

    def __init__(self,
                 probe: ExclusionAttributeProbe,
                 tmutil_path: str = TMUTIL_PATH,
                 marker_filename: str = MARKER_FILENAME):
        self.probe = probe
        self.tmutil_path = tmutil_path
        self.marker_filename = marker_filename

    def apply(self, path: PathLike) -> None:
        path = Path(path)

        self._ensure_marker(path)

        if self.probe.is_excluded(path):
            logger.debug(f"Already excluded: {path}")
            return

        self._add_exclusion(path)

    def _ensure_marker(self, path: Path) -> None:
        """Create the empty indexing marker if it is not there yet"""
        marker = path / self.marker_filename
        if marker.exists():
            return

        try:
            # 'x' so a marker created concurrently is left untouched
            with open(marker, "x"):
                pass
            logger.debug(f"Created {self.marker_filename} in {path}")
        except FileExistsError:
            pass
        except OSError as e:
            logger.warning(f"Failed to create {self.marker_filename} in {path}: {e}")

    def _add_exclusion(self, path: Path) -> bool:
        """Run tmutil synchronously; returns True on success"""
        cmd = [self.tmutil_path, TMUTIL_ADD_EXCLUSION, str(path)]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            logger.error(f"Failed to exclude: {path} ({self.tmutil_path}: {e})")
            return False

        if result.returncode == 0:
            logger.info(f"Excluded: {path}")
            return True

        stderr = (result.stderr or "").strip()
        logger.error(
            f"Failed to exclude: {path} (exit {result.returncode}"
            f"{': ' + stderr if stderr else ''})"
        )
        return False
