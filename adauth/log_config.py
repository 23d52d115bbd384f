"""Application logging setup.

Logs go to `<log_dir>/app.log` (default `data/logs`, relative to CWD),
rotated at midnight (UTC); `retention_days` rotated files are kept. A
console handler mirrors everything to stderr for container logs.
"""
from __future__ import annotations

import glob
import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Handlers installed by us, removed again on reconfiguration.
_file_handler: logging.Handler | None = None
_console_handler: logging.Handler | None = None
_log_dir = os.path.join(os.getcwd(), "data", "logs")


def setup_logging(
    level: str = "INFO",
    retention_days: int = 30,
    max_size_mb: int = 50,
    log_dir: str | None = None,
) -> None:
    global _file_handler, _console_handler, _log_dir

    level_str = (level or "INFO").strip().upper()
    if level_str not in _LEVELS:
        level_str = "INFO"
    log_level = getattr(logging, level_str)

    retention_days = max(1, min(365, int(retention_days or 30)))
    max_size_mb = max(5, min(500, int(max_size_mb or 50)))

    if log_dir:
        _log_dir = log_dir
    os.makedirs(_log_dir, exist_ok=True)

    root = logging.getLogger()
    for h in (_file_handler, _console_handler):
        if h is not None and h in root.handlers:
            root.removeHandler(h)
            h.close()

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    fh = TimedRotatingFileHandler(
        os.path.join(_log_dir, "app.log"),
        when="midnight",
        interval=1,
        backupCount=retention_days,
        encoding="utf-8",
        utc=True,
    )
    fh.suffix = "%Y-%m-%d"
    fh.setLevel(log_level)
    fh.setFormatter(formatter)
    _file_handler = fh

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    _console_handler = ch

    root.setLevel(log_level)
    root.addHandler(fh)
    root.addHandler(ch)

    _cleanup_old_logs(_log_dir, retention_days, max_size_mb)

    logging.getLogger("uvicorn.access").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("ldap3").setLevel(max(log_level, logging.WARNING))

    logging.getLogger("adauth").info(
        "Logging configured: level=%s, retention=%d days, max total size=%d MB",
        level_str, retention_days, max_size_mb,
    )


def _cleanup_old_logs(log_dir: str, retention_days: int, max_size_mb: int) -> None:
    """Delete rotated logs older than retention_days, then oldest first while over max_size_mb."""
    cutoff = time.time() - retention_days * 86400
    rotated = sorted(glob.glob(os.path.join(log_dir, "app.log.*")), key=os.path.getmtime)
    kept: list[str] = []
    for f in rotated:
        try:
            if os.path.getmtime(f) < cutoff:
                os.remove(f)
            else:
                kept.append(f)
        except OSError:
            logging.getLogger(__name__).warning("Could not remove old log %s", f, exc_info=True)

    budget = max_size_mb * 1024 * 1024
    total = sum(os.path.getsize(f) for f in kept)
    for f in kept:
        if total <= budget:
            break
        try:
            size = os.path.getsize(f)
            os.remove(f)
            total -= size
        except OSError:
            logging.getLogger(__name__).warning("Could not remove old log %s", f, exc_info=True)


def get_log_dir() -> str:
    return _log_dir
