"""Logging setup for pagekit."""

import logging
from typing import Optional

from .config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings.

    Args:
        settings: Settings to read level and format from, defaults to the
            process-wide settings
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=settings.log_format
    )
    # basicConfig is a no-op once handlers exist, so apply the level explicitly
    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    # asyncpg is chatty at DEBUG
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
