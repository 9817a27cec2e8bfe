"""Logging configuration with console and rotating file handlers"""
import glob
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import config

# Session log files kept on disk (older ones are removed on startup)
LOG_RETENTION = 5


def setup_logging(
    log_file: str = "logs/hybrid-rag.log",
    console_level: Optional[int] = None,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure logging with two destinations:
    - Console: Brief logs (LOG_LEVEL env var, INFO by default)
    - File: Detailed logs (DEBUG by default) with rotation

    Rotation policy:
    - New log file on each process start (timestamp-based naming)
    - Keep last LOG_RETENTION session files (cleanup on startup)
    - Auto-rotate when file reaches 10MB

    Args:
        log_file: Base path to log file
        console_level: Console logging level (defaults to config.LOG_LEVEL)
        file_level: File logging level (DEBUG = verbose)

    Returns:
        Path of the session log file
    """
    if console_level is None:
        console_level = getattr(logging, config.LOG_LEVEL, logging.INFO)

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Cleanup old session logs, newest first
    log_pattern = str(log_path.parent / f"{log_path.stem}_*.log")
    existing_logs = sorted(glob.glob(log_pattern), reverse=True)
    for old_log in existing_logs[LOG_RETENTION - 1:]:
        try:
            Path(old_log).unlink()
        except OSError:
            pass  # Already removed or locked

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_path.parent / f"{log_path.stem}_{timestamp}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter in handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    file_handler = RotatingFileHandler(
        session_log,
        mode='a',
        maxBytes=10*1024*1024,  # 10MB
        backupCount=10,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Client libraries are chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)

    logging.info(f"Logging configured: console={logging.getLevelName(console_level)}, file={session_log} ({logging.getLevelName(file_level)})")
    return session_log
