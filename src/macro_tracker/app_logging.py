"""Logging configuration helpers."""

import logging


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure the ``macro_tracker`` logger with a single stream handler.

    ``level`` accepts a number or a level name such as ``"debug"``. Repeated
    calls only change the level.
    """
    logger = logging.getLogger("macro_tracker")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
