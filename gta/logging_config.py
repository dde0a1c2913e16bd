"""
GTA Logging Configuration

Central logger setup: one rotating log file plus optional stderr output.
Level and location are controlled by GTA_LOG_LEVEL and GTA_LOG_DIR.
"""

import logging
import os
import sys
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


LOG_FILENAME = "gta.log"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """Log level from GTA_LOG_LEVEL, INFO when unset or unknown."""
    return _LEVELS.get(os.getenv("GTA_LOG_LEVEL", "INFO").upper(), logging.INFO)


def _is_writable(directory: Path) -> bool:
    try:
        directory.mkdir(parents=True, exist_ok=True)
        probe = directory / f".write_probe_{os.getpid()}"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink()
        return True
    except OSError:
        return False


def get_log_directory() -> Path:
    """
    Directory for log files.

    Default: ~/.gta/logs/, overridden by GTA_LOG_DIR. Falls back to the
    system temp dir when the preferred location is not writable (sandboxed
    runners, read-only homes).
    """
    override = os.getenv("GTA_LOG_DIR")
    preferred = Path(override).expanduser() if override else Path.home() / ".gta" / "logs"
    fallback = Path(tempfile.gettempdir()) / "gta-logs"

    for candidate in (preferred, fallback):
        if _is_writable(candidate):
            return candidate
    return preferred


def setup_logger(
    name: str,
    log_file: Optional[str] = LOG_FILENAME,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 2,
    console_output: bool = False,
) -> logging.Logger:
    """
    Set up a logger with file rotation and optional console output.

    Args:
        name: Logger name (e.g., 'gta.watch.loop')
        log_file: Log filename inside the log directory, None for no file
        max_bytes: Size of the log file before rotation
        backup_count: Rotated files to keep
        console_output: Also write to stderr

    Example:
        >>> logger = setup_logger('gta.git')
        >>> logger.debug("Running: %s", cmd)
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        # Already configured; only keep the level in sync with the env var.
        logger.setLevel(get_log_level())
        return logger

    logger.setLevel(get_log_level())
    logger.propagate = False

    formatter = logging.Formatter(
        fmt="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    if log_file:
        try:
            file_handler = RotatingFileHandler(
                get_log_directory() / log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            print(f"Warning: Failed to set up file logging: {e}", file=sys.stderr)

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(get_log_level())
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def enable_console_output(prefix: str = "gta") -> None:
    """Mirror every configured logger under `prefix` to stderr (--verbose)."""
    formatter = logging.Formatter(fmt="[%(levelname)s] [%(name)s] %(message)s")
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger) or not name.startswith(prefix):
            continue
        if any(type(h) is logging.StreamHandler for h in logger.handlers):
            continue
        handler = logging.StreamHandler()
        handler.setLevel(get_log_level())
        handler.setFormatter(formatter)
        logger.addHandler(handler)
