"""
Logging configuration — central setup for the CLI and the web server.

Called once at startup by main.py. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    --debug  >  --verbose  >  --quiet  >  OCSEC_LOG_LEVEL  >  WARNING

Optional file output via OCSEC_LOG_FILE / OCSEC_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping

# ── Format strings ──────────────────────────────────────────────

_FMT_MINIMAL = "%(message)s"

_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output — always full detail, full date
_FMT_FILE = _FMT_DEBUG
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# werkzeug logs every request at INFO
_NOISY_LOGGERS = ("werkzeug", "urllib3")

ENV_LEVEL = "OCSEC_LOG_LEVEL"
ENV_FILE = "OCSEC_LOG_FILE"
ENV_FILE_LEVEL = "OCSEC_LOG_FILE_LEVEL"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return (environ or {}).get(ENV_LEVEL) or "WARNING"


def _console_format(numeric_level: int) -> tuple[str, str | None]:
    if numeric_level <= logging.DEBUG:
        return _FMT_DEBUG, _DATEFMT_DEBUG
    if numeric_level <= logging.INFO:
        return _FMT_VERBOSE, _DATEFMT_VERBOSE
    return _FMT_MINIMAL, None


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the console level.
        quiet_third_party: Keep noisy third-party loggers at WARNING
            unless the console is at DEBUG.
    """
    numeric_level = _parse_level(level)
    fmt, datefmt = _console_format(numeric_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    # Root must pass everything either handler wants
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    if quiet_third_party and numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
