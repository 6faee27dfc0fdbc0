"""Process-wide logging configuration."""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def config_configure_logging(log_level: str = "INFO") -> None:
    """Configure root logging once for the process.

    Args:
        log_level: Level name such as `INFO` or `DEBUG`.

    Returns:
        None: Configures handlers as side effect.

    Raises:
        ValueError: Raised when the level name is unknown.
    """

    logging.basicConfig(level=log_level.upper(), format=_LOG_FORMAT, force=True)
    # httpx logs every request line at INFO, including query strings
    logging.getLogger("httpx").setLevel(logging.WARNING)
