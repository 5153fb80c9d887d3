"""File logging for a t9s session.

// [LAW:single-enforcer] Only this module attaches handlers to the ``t9s`` logger.

The dashboard owns the terminal, so nothing is written to stderr. Each run logs
to one rotating file chosen by ``--log-file``, then ``$T9S_LOG_FILE``, then a
per-run file under ``$T9S_LOG_DIR`` (default ``~/.local/share/t9s/logs``).
The level comes from ``$T9S_LOG_LEVEL``.

Usage: ``configure()`` once at startup, ``shutdown()`` after the app exits.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "t9s"
# Loggers that share the session file; py.warnings receives captured warnings.
_SESSION_LOGGERS = (ROOT_LOGGER, "py.warnings")
MAX_BYTES = 20 * 1024 * 1024
BACKUP_COUNT = 5
DEFAULT_LOG_DIR = "~/.local/share/t9s/logs"

# Worker lines are interleaved with the UI thread's; the thread name tells them apart.
_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None


def resolve_level(raw: str | None) -> int:
    """Numeric level for a name like ``debug``; unknown names mean INFO."""
    value = logging.getLevelName(str(raw or "INFO").strip().upper())
    return value if isinstance(value, int) else logging.INFO


def resolve_log_path(log_file: str | None = None) -> Path:
    explicit = log_file or os.environ.get("T9S_LOG_FILE")
    if explicit:
        return Path(explicit).expanduser()
    log_dir = Path(os.environ.get("T9S_LOG_DIR") or DEFAULT_LOG_DIR).expanduser()
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"t9s-{stamp}-{os.getpid()}.log"


def configure(log_file: str | None = None) -> LoggingRuntime:
    """Send the ``t9s`` logger hierarchy to a rotating file.

    Repeated calls return the first runtime untouched until ``shutdown()``.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level = resolve_level(os.environ.get("T9S_LOG_LEVEL"))
    path = resolve_log_path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))

    for name in _SESSION_LOGGERS:
        logger = logging.getLogger(name)
        logger.propagate = False
        logger.handlers[:] = [handler]
    logging.getLogger(ROOT_LOGGER).setLevel(level)
    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(logging.getLevelName(level), level, str(path))
    log.info("session started pid=%d level=%s", os.getpid(), _RUNTIME.level_name)
    return _RUNTIME


def shutdown() -> None:
    """Close the session log. A later ``configure()`` opens a new one."""
    global _RUNTIME
    if _RUNTIME is None:
        return
    log.info("session ended")
    logging.captureWarnings(False)
    for name in _SESSION_LOGGERS:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    _RUNTIME = None


def get_runtime() -> LoggingRuntime | None:
    return _RUNTIME
