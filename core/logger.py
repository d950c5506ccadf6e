"""
=====================================================
Centralized logging configuration for the collections sample.
=====================================================

Provides consistent logging setup across all modules with:
- Colored console output with emojis
- Optional UTF-8 file output under the logs directory
- Level and file defaults taken from core.config (LOG_LEVEL, LOG_FILE)

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='sample.log')
    >>> logger = get_logger(__name__)
    >>> logger.info("+ Tags after adding 'OK' {'OK', 'cassandra'}")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config

CONSOLE_FORMAT = '%(emoji)s %(asctime)s - %(name)s - %(levelname)s - %(message)s'
PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter adding ANSI colors and an emoji per level for console output.

    Attributes:
        COLORS: Dict mapping log levels to ANSI color codes
        EMOJI: Dict mapping log levels to emoji indicators
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    EMOJI = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️ ',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🔥'
    }

    def format(self, record):
        # Records are shared between handlers; color a copy only
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        record.emoji = self.EMOJI.get(levelname, '')
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional logging level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True
) -> None:
    """Configure the root logger with console and/or file handlers.

    Existing root handlers are replaced, so calling this again (e.g. from the
    CLI after parsing --verbose) reconfigures logging cleanly.

    Args:
        log_level: Logging level; defaults to LOG_LEVEL from config
        log_file: Optional log file name; defaults to LOG_FILE from config
        log_dir: Directory for log_file; defaults to the project logs/ folder
        console_output: If True, output to stdout
        use_colors: If True, use ColoredFormatter for the console

    Example:
        >>> setup_logging(log_level='DEBUG', log_file='sample.log', use_colors=False)
    """
    level = getattr(logging, (log_level or config.log_level).upper())
    log_file = log_file or config.logging.log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        if use_colors:
            console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        else:
            console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else config.logging.logs_dir
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def _init_default_logging():
    """Initialize default logging if nothing configured the root logger yet."""
    if not logging.getLogger().handlers:
        setup_logging(console_output=True, use_colors=True)


# Auto-initialize on import
_init_default_logging()
