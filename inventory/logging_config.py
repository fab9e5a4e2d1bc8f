"""Logging setup for the inventory service: one stream handler, level from LOG_LEVEL."""

from __future__ import annotations

import logging
from flask import Flask


def configure_logging(app: Flask) -> None:
    """Route the `inventory.*` loggers to stderr at the configured level.

    Unknown LOG_LEVEL names fall back to INFO. SQL statement echo stays off.
    """

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger("inventory").setLevel(level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
