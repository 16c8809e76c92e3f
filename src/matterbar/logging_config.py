"""Structured JSON logging configuration.

Configures Python stdlib logging to emit JSON with `severity`, `timestamp`
and `logger` field names so container log collectors can index them.

Usage:
    from matterbar.logging_config import configure_logging
    configure_logging()
"""

import copy
import logging
import logging.config

LOGGING_CONFIG: dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(funcName)s %(message)s",
            "rename_fields": {
                "levelname": "severity",
                "asctime": "timestamp",
                "name": "logger",
            },
            "static_fields": {
                "service": "matterbar",
            },
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def configure_logging(level: str = "INFO") -> None:
    """Apply structured JSON logging configuration.

    Call once at application startup (in the FastAPI lifespan). ``level`` is
    the root level, normally ``Settings.log_level``.
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    config["root"]["level"] = level.upper()
    logging.config.dictConfig(config)
