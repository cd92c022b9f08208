import logging
import os
from functools import wraps
import colorlog


FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# names handed out by setup_logger, so file logging can be switched on later
_PIPELINE_LOGGERS = []


def _attach_file_handler(logger, log_dir):
    """Point the logger's file output at <log_dir>/<name>.log, replacing any earlier file."""
    for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
        logger.removeHandler(handler)
        handler.close()

    os.makedirs(log_dir, exist_ok=True)
    file_handler = logging.FileHandler(os.path.join(log_dir, f'{logger.name}.log'))
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)


def setup_logger(name, log_dir=None):
    """
    Creates and returns a logger with color console output and, when a log
    directory is given (or LOG_DIR is set), a plain file handler as well.
    """
    if log_dir is None:
        log_dir = os.getenv('LOG_DIR') or None

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    if logger.handlers:  # Prevent duplicate handlers
        return logger

    if name not in _PIPELINE_LOGGERS:
        _PIPELINE_LOGGERS.append(name)

    # colored console logs
    color_formatter = colorlog.ColoredFormatter(
        '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'bold_red',
        }
    )
    stream_handler = colorlog.StreamHandler()
    stream_handler.setFormatter(color_formatter)
    logger.addHandler(stream_handler)

    if log_dir:
        _attach_file_handler(logger, log_dir)

    return logger


def configure_file_logging(log_dir):
    """
    Send every logger created by setup_logger to <log_dir>/<name>.log.
    Module loggers are built at import time, before any .env is read, so the
    entry point calls this once the configuration is loaded.
    """
    for name in _PIPELINE_LOGGERS:
        _attach_file_handler(logging.getLogger(name), log_dir)


def log_function_call(logger):
    """
    Decorator logging entry and exit of a pipeline step.
    Accepts a logger, or a zero-argument callable returning one.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            target = logger if isinstance(logger, logging.Logger) else logger()
            target.info(f"Calling function {func.__name__}")
            result = func(*args, **kwargs)
            target.info(f"Function {func.__name__} completed")
            return result
        return wrapper
    return decorator
