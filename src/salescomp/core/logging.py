"""Logging setup for processes hosting the engine."""

from __future__ import annotations

import logging

from salescomp.core.config import AppSettings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: AppSettings | None = None) -> None:
    """Configure the root logger from application settings.

    Safe to call more than once; later calls only adjust the level.
    """
    if settings is None:
        settings = AppSettings()

    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
