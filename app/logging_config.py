"""
Logging setup for the Ledger API.

Modules log through `logging.getLogger(__name__)`, which places them under the
"app" logger hierarchy. setup_logging() attaches a single console handler to
that hierarchy once, at application startup.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = "INFO", logger_name: str = "app") -> logging.Logger:
    """
    Configure console logging for the application.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        logger_name: Root of the logger hierarchy to configure.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers so repeated startups (tests, --reload) don't duplicate output
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    return logger
