"""Logging configuration shared by the server and the CLI."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from .config import LOG_DIR, LOG_FILE, LOG_RETENTION_DAYS, ensure_dirs

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def list_log_files() -> list[Path]:
    ensure_dirs()
    files = [p for p in LOG_DIR.glob(f"{LOG_FILE.name}*") if p.is_file()]
    return sorted(files, key=lambda p: p.stat().st_mtime, reverse=True)


def cleanup_old_logs() -> None:
    cutoff_ts = (datetime.now() - timedelta(days=LOG_RETENTION_DAYS)).timestamp()
    for path in list_log_files():
        if path.stat().st_mtime < cutoff_ts:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logging.getLogger(__name__).debug("Failed to delete old log file: %s", path)


def configure_logging(*, debug: bool = False, log_file: bool = True) -> logging.Logger:
    """Install stream (and rotating file) handlers; return the package logger."""
    formatter = logging.Formatter(LOG_FORMAT)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [stream_handler]

    if log_file:
        ensure_dirs()
        cleanup_old_logs()
        file_handler = TimedRotatingFileHandler(
            filename=str(LOG_FILE),
            when="midnight",
            interval=1,
            backupCount=LOG_RETENTION_DAYS,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, handlers=handlers, force=True)
    return logging.getLogger("li_outreach")
