import logging
from logging.config import dictConfig
from typing import Optional

from .config import settings

# chatty at DEBUG: one line per HTTP request / font lookup
NOISY_LOGGERS = ("urllib3", "matplotlib", "PIL")


def setup_logging(level_name: Optional[str] = None) -> None:
    """Configure the root logger; ``level_name`` overrides ``settings.log_level``."""
    level_name = level_name or settings.log_level
    level = getattr(logging, level_name.upper(), logging.INFO)

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            }
        },
        "loggers": {
            name: {"level": max(level, logging.WARNING)} for name in NOISY_LOGGERS
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }

    dictConfig(config)


__all__ = ["setup_logging"]
