"""
Base service class for orchestrator services.

This module provides a base class for services with common functionality
for error wrapping and timing logs.
"""

import asyncio
import logging
import time
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, Type

from solana_multiwallet.utils.errors import ExternalServiceError, OrchestratorError

# Configure logger
logger = logging.getLogger(__name__)


def handle_errors(error_type: Type[OrchestratorError] = ExternalServiceError, **error_kwargs: Any):
    """
    Decorator wrapping unexpected exceptions of an async method.

    Orchestrator errors and cancellation pass through untouched; anything
    else is logged and re-raised as ``error_type``.

    Args:
        error_type: The type of error to raise if an exception occurs
        error_kwargs: Extra keyword arguments for ``error_type``

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except OrchestratorError:
                raise
            except Exception as e:
                logger.exception(f"Error in {func.__name__}: {str(e)}")
                raise error_type(f"Error in {func.__name__}: {str(e)}", **error_kwargs) from e
        return wrapper
    return decorator


class BaseService:
    """
    Base service class with common functionality.

    This class provides:
    - Logging
    - Timing logs
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the base service.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def log_timing(self, operation_name: str) -> "TimingContextManager":
        """
        Create a context manager to log timing information.

        Args:
            operation_name: Name of the operation

        Returns:
            Timing context manager
        """
        return TimingContextManager(operation_name, self.logger)


class TimingContextManager:
    """Context manager to log timing information."""

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.start_time = 0.0

    def _report(self, exc_val: Optional[BaseException]) -> None:
        elapsed = time.monotonic() - self.start_time
        if exc_val is not None:
            self.logger.error(
                f"{self.operation_name} failed after {elapsed:.2f}s: {str(exc_val)}"
            )
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed:.2f}s")

    async def __aenter__(self) -> "TimingContextManager":
        self.start_time = time.monotonic()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._report(exc_val)

    def __enter__(self) -> "TimingContextManager":
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._report(exc_val)
