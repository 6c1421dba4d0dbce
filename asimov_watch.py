#!/usr/bin/env python3
"""
asimov-watch - keep dependency directories out of Time Machine and Spotlight

Watches a directory tree and, whenever a manifest such as package.json sits
next to its dependency directory (node_modules), excludes that directory
from backups and indexing.

Usage:
    asimov-watch <directory_to_watch> [ignore_dirs...]
"""

import argparse
import sys
from typing import List, Optional

from src.asimov_core import AsimovWatcher, WatchConfig
from src.utils import configure_logging, get_logger
from src.watchdog_monitor import WatchStartError

__version__ = "1.0.0"

logger = get_logger("asimov-watch")


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on bad arguments"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = UsageArgumentParser(
        prog="asimov-watch",
        description="Exclude dependency directories from Time Machine and Spotlight",
        epilog="Ignore directories are relative to the watched directory.",
    )
    parser.add_argument('watch_root', metavar='directory_to_watch',
                        help='Directory tree to watch')
    parser.add_argument('ignore_dirs', nargs='*', metavar='ignore_dirs',
                        help='Subdirectories (relative) never scanned or evaluated')
    parser.add_argument('--latency', type=float, default=None,
                        help='Event coalescing window in seconds (default: 1.0)')
    parser.add_argument('--log-level', default=None,
                        help='TRACE, DEBUG, INFO, WARNING or ERROR')
    parser.add_argument('--log-file', default=None,
                        help='Also write logs to this rotating file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, start the watcher and block; returns the exit code"""
    args = build_parser().parse_intermixed_args(argv)

    configure_logging(log_level=args.log_level, log_file=args.log_file)

    try:
        config = WatchConfig.from_env(args.watch_root, args.ignore_dirs, latency=args.latency)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    watcher = AsimovWatcher(config)
    try:
        watcher.run_forever()
    except WatchStartError as e:
        logger.error(str(e))
        return 1

    return 0


def main():
    """Main entry point"""
    sys.exit(run())


if __name__ == '__main__':
    main()
