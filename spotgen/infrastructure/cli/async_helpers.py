"""Async helpers for CLI commands."""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from functools import wraps
from typing import Any, cast

from spotgen.infrastructure.cli.ui import command_error_handler


def async_operation() -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Any]]:
    """Decorator running an async command body on a fresh event loop.

    Errors are handled by command_error_handler.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Any]:
        @command_error_handler
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            coro = func(*args, **kwargs)
            return asyncio.run(cast("Coroutine[Any, Any, Any]", coro))

        return wrapper

    return decorator
