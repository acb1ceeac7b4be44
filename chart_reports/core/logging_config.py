"""Centralized logging configuration for ChartReports.

Configures structured JSON logging for the rotating log file and
human-readable logging for interactive/CLI usage.
"""

import copy
import logging
import logging.config
from typing import Any


LOG_DIR = "logs"

# Default logging configuration
LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S%z",
        },
        "console": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "console",
            "stream": "ext://sys.stderr",
        },
        "json_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "json",
            "filename": f"{LOG_DIR}/chartreports.log",
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        },
    },
    "loggers": {
        "chart_reports": {
            "level": "DEBUG",
            "handlers": ["console", "json_file"],
            "propagate": False,
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def build_logging_config(json_output: bool = False, log_level: str = "INFO") -> dict[str, Any]:
    """Return a copy of LOGGING_CONFIG with CLI overrides applied.

    Args:
        json_output: If True, use the JSON formatter for console output
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    config = copy.deepcopy(LOGGING_CONFIG)

    if json_output:
        config["handlers"]["console"]["formatter"] = "json"

    if log_level:
        level = log_level.upper()
        config["handlers"]["console"]["level"] = level
        config["loggers"]["chart_reports"]["level"] = level

    return config


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        json_output: If True, use JSON formatter for console output (for production)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    import os

    # The rotating file handler needs its directory up front
    os.makedirs(LOG_DIR, exist_ok=True)

    logging.config.dictConfig(build_logging_config(json_output, log_level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Exported chart", extra={"chart_id": "c1", "format": "png"})
    """
    return logging.getLogger(name)
