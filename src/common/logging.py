"""Console logging for the aoc command and library."""

from __future__ import annotations

import logging
import sys


def setup_logging(
    level: int = logging.INFO,
    module_name: str = "src",
) -> logging.Logger:
    """Attach a stderr handler to the package logger and set its level.

    Logs go to stderr so that puzzle input printed on stdout stays clean.

    Args:
        level: Minimum level to emit.
        module_name: Name for the logger instance. The default covers every
            module under the ``src`` package.

    Returns:
        The package logger. Calling again only adjusts the level.
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
