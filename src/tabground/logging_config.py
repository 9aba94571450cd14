"""Console logging for the Tabground commands.

Library modules only log through ``logging.getLogger(__name__)``
and never configure handlers, the commands configure
a color-coded console logger through :func:`create_logger`.
"""

import logging
import sys

import colorlog


def create_logger(
    name: str | None = None, log_level: int | str = logging.INFO
) -> logging.Logger:
    """Create a color-coded logger writing to stdout.

    Messages are formatted as ``[LEVEL] [logger.name] message``.
    Invoking it again for the same name replaces the previous handlers.

    :param name: Name of the logger, ``tabground`` if not provided.
    :param log_level: Logging level (default: logging.INFO)
    """
    logger = colorlog.getLogger(name or "tabground")
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s[%(levelname)s]%(reset)s "
            "%(blue)s[%(name)s]%(reset)s "
            "%(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )
    logger.addHandler(console_handler)
    return logger
