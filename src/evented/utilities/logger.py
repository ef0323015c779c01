from __future__ import annotations

import logging

DEFAULT_FORMAT = "%(levelname)s %(name)s - %(message)s"


def configure_library_logging(
    level: int = logging.INFO, format: str = DEFAULT_FORMAT, **kwargs
) -> bool:
    """Configure a basic logging setup for evented if none is present.

    Evented only installs a ``NullHandler`` on import. Scripts and examples
    that want to see ``debug``/``trace`` output without configuring logging
    themselves can call this once at startup.

    RETURNS:
        True if logging was configured, False if the root logger already had
        handlers and was left alone.
    """

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return False

    logging.basicConfig(level=level, format=format, **kwargs)
    logging.getLogger("evented").setLevel(level)
    return True
