"""Shared fixtures: in-memory attribute store and a fake tmutil"""

import errno
import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from src.asimov_core import (
    EXCLUSION_ATTRIBUTE,
    DirectoryScanner,
    ExclusionApplier,
    ExclusionAttributeProbe,
    IgnorePathMatcher,
    PathEvaluator,
    RuleTable,
)


class FakeAttributeStore:
    """Stands in for the extended-attribute store, keyed by real path"""

    def __init__(self):
        self.values = {}
        self.reads = []

    def mark(self, path, value=b"\x00"):
        self.values[os.path.realpath(path)] = value

    def get(self, path, name):
        self.reads.append(path)
        key = os.path.realpath(path)
        if name != EXCLUSION_ATTRIBUTE or key not in self.values:
            raise OSError(errno.ENODATA, "No such attribute", path)
        return self.values[key]


@pytest.fixture
def attribute_store():
    return FakeAttributeStore()


@pytest.fixture
def probe(attribute_store):
    return ExclusionAttributeProbe(reader=attribute_store.get)


@pytest.fixture
def tmutil(attribute_store):
    """
    Patch subprocess.run in the exclusion module.

    A successful call marks the path excluded, the way tmutil does.
    """
    def fake_run(cmd, **kwargs):
        attribute_store.mark(cmd[-1])
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    with patch("src.asimov_core.exclusion.subprocess.run", side_effect=fake_run) as mock_run:
        yield mock_run


@pytest.fixture
def watch_root(tmp_path):
    root = tmp_path / "w"
    root.mkdir()
    return Path(os.path.realpath(root))


@pytest.fixture
def engine(watch_root, probe):
    """Factory building evaluator + scanner for the watch root"""
    def build(ignore_dirs=()):
        rules = RuleTable()
        matcher = IgnorePathMatcher(watch_root, ignore_dirs)
        applier = ExclusionApplier(probe)
        evaluator = PathEvaluator(watch_root, rules, matcher, probe, applier)
        scanner = DirectoryScanner(watch_root, evaluator, probe, matcher)
        return evaluator, scanner
    return build
