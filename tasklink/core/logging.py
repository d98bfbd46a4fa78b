from __future__ import annotations

import logging
import logging.config

from tasklink.core.config import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = (level or settings.log_level or "INFO").upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": _LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"level": resolved, "handlers": ["console"]},
            "loggers": {
                # httpx logs every request line at INFO.
                "httpx": {"level": "WARNING"},
            },
        }
    )
