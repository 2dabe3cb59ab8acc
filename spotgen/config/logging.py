"""Logging configuration and utilities using Loguru.

This module provides centralized logging setup for spotgen, including
structured logging with Loguru and an error handling decorator for
external API calls.

Public API:
----------
setup_loguru_logger(verbose: bool = False) -> None
    Configure Loguru logger for the application

get_logger(name: str) -> Logger
    Get a context-aware logger for your module
    Usage: logger = get_logger(__name__)

@resilient_operation(operation_name: str)
    Decorator for handling errors in external API calls
    Usage: @resilient_operation("spotify_search")
"""

import functools
from pathlib import Path
import sys
from typing import Any

from loguru import logger

from .settings import settings

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def setup_loguru_logger(verbose: bool = False) -> None:
    """Configure Loguru logger for the application.

    Args:
        verbose: Enable verbose logging with debug level and detailed tracebacks

    Note:
        - Removes default logger and sets up console and file handlers
        - Console output goes to stderr so stdout stays a clean URI listing
        - File format is serialized JSON with rotation and retention
    """
    logger.remove()

    log_file_path = Path(settings.logging.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    # Add contextual info to all log records
    logger.configure(extra={"service": "spotgen", "module": "root"})

    # -------------------------------------------------------------------------
    # Console Handler
    # -------------------------------------------------------------------------
    console_level = "DEBUG" if verbose else settings.logging.console_level
    logger.add(
        sink=sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:"
            "<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    # -------------------------------------------------------------------------
    # File Handler
    # -------------------------------------------------------------------------
    enqueue_logs = not settings.logging.real_time_debug
    logger.add(
        sink=str(log_file_path),
        level=settings.logging.file_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[service]} | {extra[module]} | {name}:{function}:{line} | {message}",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        backtrace=True,
        diagnose=True,
        enqueue=enqueue_logs,
        catch=True,
        serialize=True,
    )


# =============================================================================
# LOGGER FACTORY
# =============================================================================


def get_logger(name: str) -> Any:  # Use Any for Loguru logger type
    """Get a pre-configured logger instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Loguru logger bound with module context

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Resolved entries", count=12)
        ```
    """
    return logger.bind(
        module=name,
        service="spotgen",
    )


# =============================================================================
# ERROR HANDLING DECORATORS
# =============================================================================


def resilient_operation(operation_name=None, expected=()):
    """Decorator for service boundary operations with standardized error handling.

    Use on external API calls to log failures in one place. Exceptions are
    always re-raised. Exception types listed in ``expected`` are outcomes the
    caller handles, so they are logged at debug level without a traceback.

    Example:
        >>> @resilient_operation("spotify_get_track")
        >>> async def get_track(track_id):
        >>>     return await asyncio.to_thread(client.track, track_id)
    """

    def decorator(func):
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except expected as e:
                logger.debug(f"{op_name}: {e!s}")
                raise
            except Exception as e:
                logger.exception(f"Error in {op_name}: {e!s}")
                raise

        return wrapper

    return decorator
