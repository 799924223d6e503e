import logging
import sys

from scoreverse.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logging(level: str = None) -> logging.Logger:
    """Configure the package logger once; later calls only adjust the level."""
    logger = logging.getLogger("scoreverse")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    return logger
