"""
Logging setup. Call setup_logging() once at process start (API lifespan).
Modules log through logging.getLogger(__name__), under the league_backend
logger. Third-party loggers stay at WARNING on the root.
"""
from __future__ import annotations

import logging.config
import os

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_DATEFMT = os.environ.get("LOG_DATEFMT", "%Y-%m-%d %H:%M:%S")
APP_LOGGER = "league_backend"


def setup_logging(
    level: str | None = None,
    access_log: bool = True,
    datefmt: str | None = None,
) -> None:
    level = (level or LOG_LEVEL).upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "league": {"format": "%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
                       "datefmt": datefmt or LOG_DATEFMT},
            "access_simple": {"format": "%(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "league"},
            "access": {"class": "logging.StreamHandler", "formatter": "access_simple"},
        },
        "loggers": {
            # Records propagate to the root console handler
            APP_LOGGER: {"level": level},
            "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": ("INFO" if access_log else "WARNING"),
                               "handlers": ["access"], "propagate": False},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    })
