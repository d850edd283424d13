import logging
import sys
from logging.handlers import RotatingFileHandler

logger = logging.getLogger("holistay")

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


def configure_logging(level="INFO", log_file=None):
    """Attach console (and optionally rotating file) handlers to the service logger."""
    logger.setLevel(level)

    # create_app may run more than once per process (tests)
    if logger.handlers:
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    return logger


def get_logger(name=None):
    """Get a logger instance. If name is provided, returns a child logger."""
    if name:
        return logger.getChild(name)
    return logger
