"""
Error handling utilities for the Helpdesk chat backend.
"""
import functools
import inspect
from typing import Any, Callable, Type, Union, Tuple
from .logging import get_logger

logger = get_logger(__name__)


def handle_exceptions(
    error_types: Union[Type[Exception], Tuple[Type[Exception], ...]] = Exception,
    default_value: Any = None
) -> Callable:
    """Decorator to handle exceptions and return a default value.

    Works for both plain functions and coroutine functions; the wrapped
    coroutine resolves to ``default_value`` instead of raising.
    """
    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await func(*args, **kwargs)
                except error_types as e:
                    logger.error(f"Error in {func.__name__}: {str(e)}")
                    return default_value
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except error_types as e:
                logger.error(f"Error in {func.__name__}: {str(e)}")
                return default_value
        return wrapper
    return decorator
