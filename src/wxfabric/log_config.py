# wxfabric/log_config.py
"""Loguru setup for wxfabric.

The executors log through the shared loguru ``logger`` re-exported here.
Applications that want wxfabric's output in a consistent shape call
``configure_logging`` once at startup.
"""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(level: str = "INFO", sink=sys.stderr):
    """Replace every loguru handler with a single wxfabric-formatted one.

    Args:
        level: Minimum level name, case-insensitive ("debug", "WARNING", ...).
        sink: Any loguru sink. Output is colorized only on ``sys.stderr``.
    """
    level = level.upper()
    logger.remove()
    logger.add(
        sink,
        level=level,
        format=LOG_FORMAT,
        colorize=sink is sys.stderr,
        backtrace=True,
        # Variable values in tracebacks could include credentials.
        diagnose=False,
    )
    logger.debug(f"wxfabric logging configured at level {level}")
