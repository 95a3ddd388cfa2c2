"""loguru setup for the CLI and the Gemini client.

Records without a bound component are labelled "truth_sentinel" so the
console format never misses ``extra[component]``.
"""

import sys
from typing import Optional

from loguru import logger

from truth_sentinel.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Replace loguru sinks according to settings.

    Colorized console output on a TTY with ``log_format == "console"``,
    serialized JSON on stdout otherwise.

    Args:
        level: Overrides settings.log_level (the CLI ``--log-level`` option).
    """
    level = (level or settings.log_level).upper()

    logger.remove()
    logger.configure(extra={"component": "truth_sentinel"})

    if sys.stderr.isatty() and settings.log_format.lower() == "console":
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)
    else:
        logger.add(
            sys.stdout,
            format="{message}",
            level=level,
            serialize=True,
            diagnose=False,
        )


def get_logger(component: str):
    """
    Logger bound to a component name.

    Example:
        >>> log = get_logger("cli")
        >>> log.info("Reloading document index")
    """
    return logger.bind(component=component)


configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
