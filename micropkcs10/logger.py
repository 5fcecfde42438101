"""Logging for the micropkcs10 command line.

Library modules log through ``logging.getLogger(__name__)`` and stay
silent until the CLI attaches a handler to the ``micropkcs10`` logger.
With ``verbose`` the threshold drops to DEBUG, which shows the decode and
signing milestones.
"""

import logging
import os
import sys

ROOT_LOGGER = "micropkcs10"
LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _open_handler(log_file: str | None) -> logging.Handler:
    if not log_file:
        return logging.StreamHandler(sys.stderr)
    parent = os.path.dirname(log_file)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return logging.FileHandler(log_file, mode="a", encoding="utf-8")


def setup_logging(log_file: str | None = None, verbose: bool = False) -> logging.Logger:
    """Attach a single handler to the ``micropkcs10`` logger and return it.

    Handlers from an earlier call are closed first, so repeated CLI runs in
    one process do not write twice or leak open log files.

    Args:
        log_file: Append to this file. If *None*, log to stderr.
        verbose: Log at DEBUG instead of INFO.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = _open_handler(log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
