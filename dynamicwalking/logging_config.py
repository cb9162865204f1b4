"""
Log output for walking optimizations.

Modules log under the 'dynamicwalking' namespace: gait searches, program
construction, solver progress and failed walks. Nothing is shown until
setup_logging attaches handlers, so library use stays quiet.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Send dynamicwalking log records to stdout, and to log_file if given.
    Calling again replaces the handlers, e.g. from a re-run notebook cell.

    Returns the package logger.
    """
    logger = logging.getLogger("dynamicwalking")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to %s", log_file or "stdout")
    return logger
