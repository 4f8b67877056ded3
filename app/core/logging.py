from __future__ import annotations

import logging
from logging.config import dictConfig

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Install a single console handler on the root logger.

    Safe to call more than once; only the first call installs handlers,
    later calls just adjust the level.
    """
    global _configured
    from app.core.config import settings

    lvl = (level or settings.log_level or "INFO").upper()
    if _configured:
        logging.getLogger().setLevel(lvl)
        return
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "level": lvl,
                }
            },
            "root": {"level": lvl, "handlers": ["console"]},
            "loggers": {
                "uvicorn.access": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
        }
    )
    _configured = True
