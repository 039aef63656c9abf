"""Logging utilities for gh-archive."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(
    level: str = 'WARNING',
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """Setup logging configuration using loguru.

    The console sink writes to stderr so log lines stay apart from the
    interactive prompts on stdout.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        log_format: Optional custom log format
    """
    # Remove default handler
    logger.remove()

    # Default format if not provided
    if log_format is None:
        log_format = (
            '<green>{time:YYYY-MM-DD HH:mm:ss}</green> | '
            '<level>{level: <8}</level> | '
            '<cyan>{extra[component]}</cyan> | '
            '<level>{message}</level>'
        )

    logger.configure(extra={'component': 'gh-archive'})

    # Add console handler
    logger.add(
        sys.stderr,
        format=log_format,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    # Add file handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # File format (no colors)
        file_format = (
            '{time:YYYY-MM-DD HH:mm:ss} | '
            '{level: <8} | '
            '{extra[component]} | '
            '{name}:{function}:{line} | '
            '{message}'
        )

        # Always capture debug detail in the file
        logger.add(
            log_file,
            format=file_format,
            level='DEBUG',
            rotation='10 MB',
            retention='30 days',
            compression='gz',
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f'Logging initialized with level: {level}')
    if log_file:
        logger.debug(f'Log file: {log_file}')

