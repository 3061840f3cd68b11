from __future__ import annotations

import logging

APP_LOGGER = "fintrack"


def configure_app_logging(level: str = "INFO") -> logging.Logger:
    """
    Set the verbosity of the ``fintrack`` logger tree and return it.

    Access denials (``fintrack.security.*``) and role changes
    (``fintrack.routers.users``) are logged below this logger. Handlers are
    left to whoever runs the app (uvicorn, pytest's caplog); records
    propagate to the root logger.
    """

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level.upper())
    logger.propagate = True
    return logger
