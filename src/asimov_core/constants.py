"""
Core constants for the asimov watcher
"""

# Empty file dropped into an excluded directory so Spotlight skips it
MARKER_FILENAME = ".metadata_never_index"

# Extended attribute set by tmutil on excluded items
EXCLUSION_ATTRIBUTE = "com.apple.metadata:com_apple_backup_excludeItem"

# Time Machine control utility
TMUTIL_PATH = "/usr/bin/tmutil"
TMUTIL_ADD_EXCLUSION = "addexclusion"

# Coalescing window handed to the event source (seconds)
DEFAULT_LATENCY = 1.0

# Deeper subtrees are skipped by the initial scan
MAX_SCAN_DEPTH = 4096

# (sentinel, target) pairs, in evaluation order
DEFAULT_RULES = [
    ("package.json", "node_modules"),
    ("composer.json", "vendor"),
    ("requirements.txt", "venv"),
    ("Gemfile", "vendor"),
    ("Cargo.toml", "target"),
]
