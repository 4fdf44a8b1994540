"""
Logging setup for the Arkom API.

``configure_logging`` is called once from ``arkom.main``; everything else
just asks for ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging

from arkom.core.config import get_settings

DEFAULT_LOGGER_NAME = "arkom"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def _parse_level(value: str | None) -> int:
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, force: bool = False) -> logging.Logger:
    """
    Attach a stream handler to the ``arkom`` logger using ``Settings.log_level``.

    Repeated calls are no-ops unless ``force`` is set.
    """
    global _configured

    logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    if _configured and not force:
        return logger

    level = _parse_level(get_settings().log_level)
    if force:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    _configured = True
    return logger
