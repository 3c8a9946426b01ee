"""
Logging configuration for the LogiTrack service.

Usage:
    from logitrack.logging_config import setup_logging
    setup_logging()  # Call once at application startup

Environment variables:
    LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)
"""
import logging
import os
import sys

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level: str = None) -> str:
    """
    Configure logging for the application.

    Args:
        level: Log level string. If not provided, reads from LOG_LEVEL env var,
               defaults to INFO. Unknown values fall back to INFO.

    Returns:
        The level name that was applied.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()
    if level not in VALID_LEVELS:
        level = "INFO"

    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    logging.getLogger("logitrack").setLevel(numeric_level)

    # SQL echo and passlib backend probing are noise outside debug runs
    if level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("passlib").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s level", level)
    return level
