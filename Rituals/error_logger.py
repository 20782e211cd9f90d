#!/usr/bin/env python3
"""
Centralized error logging for Rituals.

Store failures are reported here before they propagate, so a dropped write
leaves a trace even when the presentation layer swallows the exception.
Log lines go to stderr and, when possible, to a rotating file.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Growth protection constants
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB
MAX_LOG_BACKUPS = 3

LOG_FILE_NAME = "rituals-errors.log"


def _log_dir() -> Path:
    """Directory for the error log; RITUALS_LOG_DIR overrides the default."""
    override = os.environ.get("RITUALS_LOG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".rituals" / "logs"


def _rotate_log_if_needed(log_file: Path) -> None:
    """Rotate log file if it exceeds MAX_LOG_SIZE_BYTES."""
    try:
        if not log_file.exists():
            return

        if log_file.stat().st_size < MAX_LOG_SIZE_BYTES:
            return

        # Shift .1 -> .2 -> ... dropping anything past MAX_LOG_BACKUPS
        oldest = log_file.with_suffix(f".{MAX_LOG_BACKUPS}.log")
        if oldest.exists():
            oldest.unlink()
        for i in range(MAX_LOG_BACKUPS - 1, 0, -1):
            old_backup = log_file.with_suffix(f".{i}.log")
            if old_backup.exists():
                old_backup.rename(log_file.with_suffix(f".{i + 1}.log"))

        log_file.rename(log_file.with_suffix(".1.log"))
    except OSError as e:
        print(f"[error_logger] Log rotation failed: {e}", file=sys.stderr)


def _append(log_message: str) -> None:
    try:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / LOG_FILE_NAME

        _rotate_log_if_needed(log_file)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(log_message + "\n")
    except OSError as e:
        # Already on stderr; only note the file problem
        print(f"[error_logger] Failed to write log file: {e}", file=sys.stderr)


def log_error(module: str, error: Exception, context: Optional[str] = None,
              reraise: bool = False):
    """
    Log an error to stderr and to the error log file.

    Args:
        module: Module name (e.g., "kv", "progress")
        error: The exception that occurred
        context: What was being attempted
        reraise: Whether to re-raise the exception after logging

    Example:
        try:
            kv.put_json(key, value)
        except sqlite3.Error as e:
            log_error("kv", e, f"write {key}")
    """
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_parts = [
        f"[{timestamp}]",
        f"[{module}]",
        f"{type(error).__name__}: {error}",
    ]
    if context:
        log_parts.append(f"Context: {context}")

    log_message = " ".join(log_parts)
    print(log_message, file=sys.stderr)
    _append(log_message)

    if reraise:
        raise error


def log_warning(module: str, message: str):
    """
    Log a warning message to stderr.

    Args:
        module: Module name
        message: Warning message
    """
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"[{timestamp}] [{module}] WARNING: {message}", file=sys.stderr)
