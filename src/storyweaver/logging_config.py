"""
Centralized logging configuration for StoryWeaver.

Every module logs through logging.getLogger(__name__), so configuring the
top-level "storyweaver" logger once (the backend does it at startup) covers
the whole package.

Log levels:
    DEBUG: Prompts sent to Gemini, payload sizes, state transitions
    INFO: Normal workflow progress (story woven, scenes appended, images ready)
    WARNING: Non-fatal issues (unexpected scene counts, ignored actions)
    ERROR: Failed generation requests

Usage:
    from storyweaver.logging_config import setup_logging

    logger = setup_logging("storyweaver", level="debug")
    logger.info("Backend started")
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def parse_level(level_name: str) -> int:
    """Map a level name such as "debug" to its logging constant (INFO if unknown)."""
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def _build_handlers(log_file: Optional[Path], console_output: bool) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if console_output:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode='a', encoding='utf-8'))
    return handlers


def setup_logging(
    name: str = "storyweaver",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Calling this again for the same name replaces the previous handlers.

    Args:
        name: Logger name (usually the package name)
        level: Logging level, as a constant or a name like "warning"
        log_file: Optional path to append logs to
        console_output: Whether to log to stdout

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = parse_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _build_handlers(log_file, console_output):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
