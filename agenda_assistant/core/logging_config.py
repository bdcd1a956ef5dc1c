"""Logging configuration for the Agenda Assistant application.
"""

import logging
import logging.config

# Define logging format
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_logging_config(log_level: str = "INFO") -> dict:
    """Returns the dictConfig used by the app and handed to uvicorn."""
    level = log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False, # Keep existing loggers (e.g., uvicorn)
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level,
                "propagate": True,
            },
            "uvicorn.error": {
                "level": logging.INFO,
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": logging.WARNING, # Reduce verbosity of access logs
                "handlers": ["console"],
                "propagate": False,
            },
            "httpx": {
                "level": logging.WARNING,
                "handlers": ["console"],
                "propagate": False,
            },
            "googleapiclient": {
                "level": logging.WARNING, # discovery cache warnings are noisy
                "handlers": ["console"],
                "propagate": False,
            },
            "openai": {
                "level": logging.WARNING,
                "handlers": ["console"],
                "propagate": False,
            },
        }
    }


LOGGING_CONFIG = build_logging_config()


def configure_logging(log_level: str = "INFO") -> None:
    logging.config.dictConfig(build_logging_config(log_level))
