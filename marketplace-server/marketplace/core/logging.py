"""Process-wide logging setup."""

from __future__ import annotations

import logging

from marketplace.core.config import Settings


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.logging.level.upper()
    logging.basicConfig(level=level, format=settings.logging.format)
    # SQL echo is controlled by the database settings, keep the engine logger quiet otherwise.
    if not settings.database.echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


__all__ = ["configure_logging"]
