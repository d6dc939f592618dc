import logging
from logging.handlers import RotatingFileHandler
import os


def _rotating_handler(path, level, formatter):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=1024 * 1024,  # 1MB
        backupCount=5
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logger(name, log_file=None, error_log_file=None, level=logging.INFO):
    """Configure a logger with console output and optional rotating files

    Args:
        name: logger name, usually the package name
        log_file: path of the general log file
        error_log_file: path of the error-only log file
        level: level for the logger and console handler
    """
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # drop handlers from an earlier setup
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        logger.addHandler(_rotating_handler(log_file, level, formatter))

    if error_log_file:
        logger.addHandler(_rotating_handler(error_log_file, logging.ERROR, formatter))

    return logger
