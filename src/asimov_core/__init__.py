"""
Core engine for asimov-watch

Detects a sentinel manifest next to its heavy sibling directory and marks
that directory excluded from Time Machine backups and Spotlight indexing:
- RuleTable: fixed sentinel/target pairs
- IgnorePathMatcher: prefix pruning of caller-supplied subtrees
- ExclusionAttributeProbe / ExclusionApplier: idempotent exclusion
- PathEvaluator: per-path rule firing
- DirectoryScanner: one-shot initial walk
"""

from .constants import DEFAULT_RULES, EXCLUSION_ATTRIBUTE, MARKER_FILENAME
from .config import WatchConfig
from .rules import Rule, RuleTable
from .ignore_paths import IgnorePathMatcher
from .exclusion import ExclusionApplier, ExclusionAttributeProbe
from .evaluator import EventFlags, PathEvaluator
from .scanner import DirectoryScanner, ScanResult
from .watcher import AsimovWatcher

__all__ = [
    'DEFAULT_RULES',
    'EXCLUSION_ATTRIBUTE',
    'MARKER_FILENAME',
    'WatchConfig',
    'Rule',
    'RuleTable',
    'IgnorePathMatcher',
    'ExclusionApplier',
    'ExclusionAttributeProbe',
    'EventFlags',
    'PathEvaluator',
    'DirectoryScanner',
    'ScanResult',
    'AsimovWatcher',
]
