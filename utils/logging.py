"""
Logging utilities for the Helpdesk chat backend.
"""
import logging
import functools
import os
from typing import Any, Callable


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with standard configuration.

    Log level can be controlled via the HELPDESK_LOG_LEVEL env var. Default INFO.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        level_str = os.getenv("HELPDESK_LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level_str, logging.INFO))
    return logger


def log_function_call() -> Callable:
    """Decorator to log function calls."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_logger(func.__module__)
            logger.info(f"Calling {func.__name__}")
            try:
                result = func(*args, **kwargs)
                logger.info(f"Completed {func.__name__}")
                return result
            except Exception as e:
                logger.error(f"Error in {func.__name__}: {str(e)}")
                raise
        return wrapper
    return decorator
