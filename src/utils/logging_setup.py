"""
Logging configuration for asimov-watch.

Provides environment-aware logging that:
- Writes to stderr by default (launchd redirects it to the agent's log file)
- Optionally writes to a rotating log file
- Outputs JSON when ASIMOV_LOG_JSON is set
- Includes custom TRACE level for per-path decisions
"""

import sys
import logging
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

# Define TRACE level (lower number = more detailed)
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

# Add a trace method to the logger
def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)

# Add the method to the Logger class
logging.Logger.trace = trace

# Also add it as a module-level convenience function
def add_trace_to_logger():
    """Ensure trace method is available on all logger instances"""
    if not hasattr(logging.Logger, 'trace'):
        logging.Logger.trace = trace


HUMAN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log collectors"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def resolve_level(log_level: Optional[str] = None) -> int:
    """
    Map a level name to a numeric level.

    Falls back to ASIMOV_LOG_LEVEL, then LOG_LEVEL, then INFO.
    """
    level_str = log_level or os.environ.get('ASIMOV_LOG_LEVEL') or os.environ.get('LOG_LEVEL', 'INFO')

    if level_str.upper() == 'TRACE':
        return TRACE_LEVEL
    return getattr(logging, level_str.upper(), logging.INFO)


def configure_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Override log level (defaults to ASIMOV_LOG_LEVEL/LOG_LEVEL or INFO)
        log_file: Path to a rotating log file; stderr only when omitted
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        json_output: Emit JSON records (defaults to ASIMOV_LOG_JSON)
    """
    add_trace_to_logger()
    level = resolve_level(log_level)

    if json_output is None:
        json_output = os.environ.get('ASIMOV_LOG_JSON', '').lower() in ('true', '1', 'yes')
    formatter = JsonFormatter() if json_output else logging.Formatter(HUMAN_FORMAT)

    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers = []

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

        # Also add console handler for immediate feedback
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    root_logger.setLevel(level)

    # watchdog logs every emitter hiccup at DEBUG
    logging.getLogger('watchdog').setLevel(max(level, logging.INFO))

    logger = logging.getLogger('asimov-watch')
    logger.debug(f"Logging configured - Level: {logging.getLevelName(level)}, file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    add_trace_to_logger()
    return logging.getLogger(name)
