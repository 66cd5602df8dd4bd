"""
Logging configuration for the agent.

The agent runs unattended at machine startup, so its log is the only
record an operator gets of what was installed, skipped, or broken.
``setup_logging`` is called once by main.py; every module logs through
``logging.getLogger(__name__)`` and inherits it.

Level precedence:
    --debug / --verbose / --quiet  >  BUNDLESYNC_LOG_LEVEL  >  INFO

A copy of the log can be written to BUNDLESYNC_LOG_FILE, at its own
level (BUNDLESYNC_LOG_FILE_LEVEL), e.g. DEBUG on disk and INFO on the
console.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from pathlib import Path

ENV_LOG_LEVEL = "BUNDLESYNC_LOG_LEVEL"
ENV_LOG_FILE = "BUNDLESYNC_LOG_FILE"
ENV_LOG_FILE_LEVEL = "BUNDLESYNC_LOG_FILE_LEVEL"

DEFAULT_LEVEL = "INFO"

# ── Formats ─────────────────────────────────────────────────────

# (format, datefmt) per console level; the lowest matching threshold wins
_CONSOLE_FORMATS = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(levelname)-5s %(message)s", "%Y-%m-%d %H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s %(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Storage client libraries log every request and retry at INFO/DEBUG
_NOISY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return (env or {}).get(ENV_LOG_LEVEL) or DEFAULT_LEVEL


def setup_logging(
    level: str = DEFAULT_LEVEL,
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure logging for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file; parent directories are created.
        log_file_level: Level for the file (default: same as ``level``).
        quiet_third_party: Hold the storage client loggers at WARNING
            unless the console is at DEBUG.
    """
    console_level = _parse_level(level)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_console_handler(console_level))

    effective_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root.addHandler(_file_handler(Path(log_file), file_level))
        effective_level = min(effective_level, file_level)

    root.setLevel(effective_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # A broken log stream must never take down an install run
    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
            break
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value, defaulting to INFO."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.INFO
