"""Logging helpers for swaggerlite."""

import logging

_LOGGER_NAME = "swaggerlite"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the swaggerlite hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Send swaggerlite records to stderr, replacing handlers from earlier runs."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[swaggerlite] %(levelname)s %(message)s"))
    logger.addHandler(handler)
    return logger
