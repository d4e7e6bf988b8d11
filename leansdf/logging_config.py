"""Console (and optional file) logging for the ``leansdf`` namespace.

The library itself only creates module loggers; scripts call
:func:`setup_logging` once to see the LOD progress messages.
"""

import logging
import sys
from typing import List, Optional

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Attach handlers to the ``leansdf`` logger, replacing earlier ones.

    Parameters
    ----------
    level : int
        Threshold for the logger and its handlers.
    log_file : str, optional
        Also write records to this file (truncated first).

    Returns
    -------
    logging.Logger
        The configured ``leansdf`` logger.
    """
    logger = logging.getLogger("leansdf")
    logger.setLevel(level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(_FORMAT, datefmt="%H:%M:%S")
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("leansdf logging at level %s", logging.getLevelName(level))
    return logger
