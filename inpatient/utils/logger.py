"""
System logging configuration.
"""
import logging
from inpatient.config import settings


def configure_logging(level: str = None) -> logging.Logger:
    """
    Configures and returns the main system logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger
    """
    if level is None:
        level = settings.LOG_LEVEL

    level_num = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        settings.LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger = logging.getLogger('inpatient')
    logger.setLevel(level_num)

    # Avoid duplicated handlers on reload
    if not logger.handlers:
        logger.addHandler(console_handler)

    return logger


# Global logger
logger = configure_logging()
