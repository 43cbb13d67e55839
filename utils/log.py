import logging
from typing import Optional

from config import get_config_value

LOGGER_NAMESPACE = "learningmate"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(module)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Top-level packages whose module loggers hang off the app logger.
_PACKAGES = ("db", "utils")


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach one console handler to the app logger and the package loggers.

    ``level`` defaults to ``[logging] level`` from config.
    """
    if level is None:
        level = get_config_value("logging", "level", "INFO")
    resolved = getattr(logging, str(level).upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    for name in (LOGGER_NAMESPACE,) + _PACKAGES:
        target = logging.getLogger(name)
        target.setLevel(resolved)
        target.handlers.clear()
        target.addHandler(handler)
        target.propagate = False
    return logger
