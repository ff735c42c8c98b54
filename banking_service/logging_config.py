"""
Logging configuration.

Every module logs through logging.getLogger(__name__), so all
application loggers live under the "banking_service" namespace.
setup_logging() attaches a single stream handler to that
namespace at startup.
"""

import logging

LOGGER_NAME = "banking_service"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the application logger.

    Safe to call more than once: existing handlers are replaced
    rather than stacked, so log lines are never duplicated.
    """
    logger = logging.getLogger(LOGGER_NAME)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Keep uvicorn/root handlers from printing the same record twice
    logger.propagate = False

    return logger
