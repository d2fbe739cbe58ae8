"""Logging setup shared by the CLI and embedding applications."""

import logging

from masterycore.shared.config import get_settings


def setup_logging(level: str | None = None) -> None:
    """Configure application logging.

    Sets up structured JSON logging for production
    and human-readable format for development.

    Args:
        level: Optional level name overriding the LOG_LEVEL setting
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    if settings.is_production:
        # JSON format for production (easier to parse in log aggregators)
        log_format = (
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S%z",
        force=True,
    )

    # Redis client logs every reconnect at INFO
    logging.getLogger("redis").setLevel(logging.WARNING)
