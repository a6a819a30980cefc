import logging
from logging.handlers import RotatingFileHandler
import sys

from .config import get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


# Only INFO and WARNING records go to the info log
class InfoFilter(logging.Filter):
    def filter(self, record):
        return record.levelno in (logging.INFO, logging.WARNING)


def setup_logging(level=None, info_path=None, error_path=None, stream=sys.stdout):
    """Attach console and optional rotating file handlers to the ``onfleet`` logger.

    Without an explicit level, LOG_LEVEL from the environment is used.
    """
    if level is None:
        level = get_settings().log_level.upper()
    logger = logging.getLogger("onfleet")
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # --- Info Log Handler ---
    if info_path:
        info_handler = RotatingFileHandler(
            info_path,
            maxBytes=5*1024*1024,  # 5 MB
            backupCount=5
        )
        info_handler.setLevel(logging.INFO)
        info_handler.setFormatter(formatter)
        info_handler.addFilter(InfoFilter())
        logger.addHandler(info_handler)

    # --- Error Log Handler ---
    if error_path:
        error_handler = RotatingFileHandler(
            error_path,
            maxBytes=5*1024*1024,
            backupCount=5
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        logger.addHandler(error_handler)

    # --- Console Log Handler ---
    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    return logger
