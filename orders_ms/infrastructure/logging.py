"""
Logging infrastructure.

Every module logs through ``logging.getLogger(__name__)``; this module only
installs the shared format once at bootstrap.
"""
import logging


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install the service log format on the root logger.

    Args:
        level: Level name, e.g. ``INFO`` or ``debug``
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper())
