"""Configuration of Tabground from environment variables.

The settings are read from the environment when :func:`load_settings`
is invoked:

* ``TABGROUND_DATA_DIR`` additional directory where ``<name>.csv``
  datasets are looked up.
* ``TABGROUND_OUTPUT_DIR`` directory where the tour saves charts,
  defaults to ``charts``.
* ``TABGROUND_CHART_FORMAT`` file format for the saved charts,
  one of ``html``, ``json``, ``png``, ``svg``. Defaults to ``html``.
* ``TABGROUND_LOG_LEVEL`` the logging level, defaults to ``INFO``.
"""

import logging
import os
from dataclasses import dataclass

from .errors import ConfigurationError

CHART_FORMATS = ("html", "json", "png", "svg")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""

    data_dir: str | None
    output_dir: str
    chart_format: str
    log_level: str

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Read the settings from the environment.

    :param environ: The mapping to read the variables from,
                    defaults to ``os.environ``.
    :raises ConfigurationError: When a value is not acceptable.
    """
    if environ is None:
        environ = os.environ

    chart_format = environ.get("TABGROUND_CHART_FORMAT", "html").lower()
    if chart_format not in CHART_FORMATS:
        raise ConfigurationError(
            f"Invalid TABGROUND_CHART_FORMAT {chart_format!r}, "
            f"expected one of {', '.join(CHART_FORMATS)}"
        )

    log_level = environ.get("TABGROUND_LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid TABGROUND_LOG_LEVEL {log_level!r}, "
            f"expected one of {', '.join(LOG_LEVELS)}"
        )

    return Settings(
        data_dir=environ.get("TABGROUND_DATA_DIR") or None,
        output_dir=environ.get("TABGROUND_OUTPUT_DIR", "charts"),
        chart_format=chart_format,
        log_level=log_level,
    )
