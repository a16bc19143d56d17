"""Logging configuration helpers."""

import logging

_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"

# Client libraries that log every request line at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the ``saycal`` logger.

    Calling it again only updates the level, so app factories and tests can
    call it freely.
    """
    logger = logging.getLogger("saycal")
    logger.setLevel(level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
