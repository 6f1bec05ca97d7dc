import logging

from superadmin.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Apply the configured log level to the root logger (called on startup)."""
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    # pymongo's own debug chatter is not useful here
    logging.getLogger("pymongo").setLevel(max(logging.getLevelName(level), logging.INFO))
