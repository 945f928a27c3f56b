"""Logging setup for applications embedding the scheduler."""

import logging

from .config import Settings, settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: Settings | None = None) -> None:
    """Configure root logging from settings.

    Library modules only create named loggers; the embedding application
    decides whether to call this.
    """
    config = config or settings
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
