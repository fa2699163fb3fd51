"""Centralized logging configuration for voxelsight.

Usage:
    from voxelsight.utils.logging_config import setup_logging

    # Simple: writes to stderr + logs/<app_name>.log:
    setup_logging(app_name="demo")

    # With debug level (per-query traversal summaries):
    setup_logging(app_name="demo", debug=True)

    # Stderr only:
    setup_logging()
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Log rotation defaults
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_LOG_DIR = _PROJECT_ROOT / "logs"


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    fmt: str = DEFAULT_FORMAT,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
    *,
    app_name: str | None = None,
    log_dir: str | Path | None = None,
    debug: bool = False,
) -> str | None:
    """Configure root logger with consistent format and optional file output.

    Call this once at the start of each entry point. When *log_file* or
    *app_name* is given, a RotatingFileHandler caps the log at *max_bytes*
    with *backup_count* rotated backups. Calling again with a new file
    adds that file to the existing root handlers.

    Returns the resolved log file path, or None when logging to stderr only.
    """
    if debug:
        level = logging.DEBUG

    resolved_log_file = log_file
    if app_name and not log_file:
        target_dir = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
        target_dir.mkdir(parents=True, exist_ok=True)
        resolved_log_file = str(target_dir / f"{app_name}.log")

    root = logging.getLogger()
    file_handler: RotatingFileHandler | None = None
    if resolved_log_file:
        Path(resolved_log_file).parent.mkdir(parents=True, exist_ok=True)
        target = os.path.abspath(resolved_log_file)
        for h in root.handlers:
            if isinstance(h, RotatingFileHandler) and h.baseFilename == target:
                file_handler = h
                break
        else:
            file_handler = RotatingFileHandler(
                resolved_log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setFormatter(logging.Formatter(fmt))

    if not root.handlers:
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if file_handler is not None:
            handlers.append(file_handler)
        logging.basicConfig(level=level, format=fmt, handlers=handlers)
    else:
        # basicConfig is a no-op once the root has handlers; attach directly
        root.setLevel(level)
        if file_handler is not None and file_handler not in root.handlers:
            root.addHandler(file_handler)

    if resolved_log_file:
        root.info("Logging to %s", resolved_log_file)
    return resolved_log_file
