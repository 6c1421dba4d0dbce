#!/usr/bin/env python3
"""
Test the exclusion attribute probe and the exclusion applier
"""

import subprocess
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from src.asimov_core import (
    EXCLUSION_ATTRIBUTE,
    MARKER_FILENAME,
    ExclusionApplier,
    ExclusionAttributeProbe,
)


class TestExclusionAttributeProbe(unittest.TestCase):
    """Attribute absent or unreadable means not excluded"""

    def test_present_and_non_empty(self):
        reader = Mock(return_value=b"com.apple.backupd")
        probe = ExclusionAttributeProbe(reader=reader)

        self.assertTrue(probe.is_excluded("/w/proj/node_modules"))
        reader.assert_called_once_with("/w/proj/node_modules", EXCLUSION_ATTRIBUTE)

    def test_present_but_empty(self):
        probe = ExclusionAttributeProbe(reader=Mock(return_value=b""))
        self.assertFalse(probe.is_excluded("/w/proj/node_modules"))

    def test_absent(self):
        probe = ExclusionAttributeProbe(reader=Mock(side_effect=OSError(93, "Attribute not found")))
        self.assertFalse(probe.is_excluded("/w/proj/node_modules"))

    def test_missing_path(self):
        probe = ExclusionAttributeProbe(reader=Mock(side_effect=FileNotFoundError()))
        self.assertFalse(probe.is_excluded("/does/not/exist"))

    def test_custom_attribute_name(self):
        reader = Mock(return_value=b"1")
        probe = ExclusionAttributeProbe(attribute_name="user.excluded", reader=reader)

        probe.is_excluded(Path("/w/x"))
        reader.assert_called_once_with("/w/x", "user.excluded")

    def test_default_reader_on_plain_directory(self):
        """Real attribute store: a fresh temp dir carries no exclusion"""
        import tempfile
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertFalse(ExclusionAttributeProbe().is_excluded(temp_dir))


def test_apply_creates_marker_and_runs_tmutil(tmp_path, probe, tmutil):
    target = tmp_path / "node_modules"
    target.mkdir()

    ExclusionApplier(probe).apply(target)

    marker = target / MARKER_FILENAME
    assert marker.is_file()
    assert marker.stat().st_size == 0
    tmutil.assert_called_once()
    assert tmutil.call_args.args[0] == ["/usr/bin/tmutil", "addexclusion", str(target)]


def test_apply_is_idempotent(tmp_path, probe, tmutil):
    """Second application spawns nothing and leaves the marker alone"""
    target = tmp_path / "node_modules"
    target.mkdir()
    applier = ExclusionApplier(probe)

    applier.apply(target)
    marker = target / MARKER_FILENAME
    mtime = marker.stat().st_mtime_ns

    applier.apply(target)
    applier.apply(target)

    assert tmutil.call_count == 1
    assert marker.stat().st_mtime_ns == mtime
    assert marker.stat().st_size == 0


def test_existing_marker_is_not_rewritten(tmp_path, probe, tmutil):
    target = tmp_path / "vendor"
    target.mkdir()
    marker = target / MARKER_FILENAME
    marker.write_text("")

    ExclusionApplier(probe).apply(target)

    assert marker.read_text() == ""
    assert tmutil.call_count == 1


def test_already_excluded_creates_marker_without_spawning(tmp_path, attribute_store, probe, tmutil):
    target = tmp_path / "node_modules"
    target.mkdir()
    attribute_store.mark(target)

    ExclusionApplier(probe).apply(target)

    assert (target / MARKER_FILENAME).is_file()
    tmutil.assert_not_called()


def test_marker_failure_does_not_block_exclusion(tmp_path, probe, tmutil, caplog):
    """A missing directory cannot hold the marker, tmutil still runs"""
    target = tmp_path / "gone"

    with caplog.at_level("WARNING"):
        ExclusionApplier(probe).apply(target)

    assert f"Failed to create {MARKER_FILENAME}" in caplog.text
    tmutil.assert_called_once()


def test_tmutil_failure_is_logged(tmp_path, probe, caplog):
    target = tmp_path / "target"
    target.mkdir()
    failed = subprocess.CompletedProcess([], 1, stdout="", stderr="Permission denied")

    with patch("src.asimov_core.exclusion.subprocess.run", return_value=failed):
        with caplog.at_level("ERROR"):
            ExclusionApplier(probe).apply(target)

    assert f"Failed to exclude: {target}" in caplog.text
    assert "Permission denied" in caplog.text


def test_missing_tmutil_is_logged(tmp_path, probe, caplog):
    target = tmp_path / "target"
    target.mkdir()
    applier = ExclusionApplier(probe, tmutil_path=str(tmp_path / "no-such-tmutil"))

    with caplog.at_level("ERROR"):
        applier.apply(target)

    assert f"Failed to exclude: {target}" in caplog.text


def test_success_is_logged(tmp_path, probe, tmutil, caplog):
    target = tmp_path / "venv"
    target.mkdir()

    with caplog.at_level("INFO"):
        ExclusionApplier(probe).apply(target)

    assert f"Excluded: {target}" in caplog.text


if __name__ == "__main__":
    pytest.main([__file__])
