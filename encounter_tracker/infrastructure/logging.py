"""Logging setup for processes that host the data services.

Modules log through logging.getLogger(__name__); this only installs handlers
and levels once at startup.
"""

from __future__ import annotations

import logging.config

from encounter_tracker.infrastructure import database

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install the console handler; level defaults to Settings.log_level (LOG_LEVEL)."""
    level = level or database.settings.log_level
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                "encounter_tracker": {"level": level.upper(), "handlers": ["console"], "propagate": False},
                # SQL statements are logged by the engine itself when SQL_ECHO is on.
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
