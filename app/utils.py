"""
Shared helpers.
"""
import logging

from app.core import config


_configured = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger, configuring the root handler on first use.

    Usage:
        from app.utils import get_logger

        log = get_logger(__name__)
        log.info("Role %s updated", role_name)
    """
    global _configured
    if not _configured:
        logging.basicConfig(
            level=config.LOG_LEVEL,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
        _configured = True
    return logging.getLogger(name)


def trim_split(value: str | None, delimiter: str = ",") -> list[str]:
    """Split a delimited string, trimming each part and dropping empty ones."""
    if not value:
        return []
    return [part.strip() for part in value.split(delimiter) if part.strip()]


def empty_to_none(values: dict) -> dict:
    """Return a copy of ``values`` with empty strings replaced by None."""
    return {key: (None if value == "" else value) for key, value in values.items()}
