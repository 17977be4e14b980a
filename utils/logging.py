"""Category-tagged structured logging.

Messages look like ``[configuration] Configuration updated | path=A:B`` and
propagate to the root logger configured in ``Start.py``.
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from enum import Enum
from typing import Any, Callable


class LogCategory(str, Enum):
    API = "api"
    SYSTEM = "system"
    CONFIGURATION = "configuration"
    AUDIT = "audit"
    SECURITY = "security"
    STORAGE = "storage"


class DetailedLogger:
    """Thin wrapper over ``logging.Logger`` that renders keyword context."""

    def __init__(self, name: str, category: LogCategory = LogCategory.SYSTEM):
        self._logger = logging.getLogger(name)
        self.category = category

    @property
    def name(self) -> str:
        return self._logger.name

    def render(self, message: str, **context: Any) -> str:
        fields = [f"{key}={value}" for key, value in context.items() if value is not None]
        text = f"[{self.category.value}] {message}"
        return f"{text} | {' '.join(fields)}" if fields else text

    def _emit(self, level: int, message: str, context: dict, exc_info: bool = False) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, self.render(message, **context), exc_info=exc_info)

    def debug(self, message: str, **context: Any) -> None:
        self._emit(logging.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._emit(logging.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._emit(logging.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._emit(logging.ERROR, message, context)

    def exception(self, message: str, **context: Any) -> None:
        """Error with the active traceback attached."""
        self._emit(logging.ERROR, message, context, exc_info=True)


def get_detailed_logger(
    name: str, category: LogCategory = LogCategory.SYSTEM
) -> DetailedLogger:
    return DetailedLogger(name, category)


def detailed_log_function(category: LogCategory = LogCategory.SYSTEM) -> Callable:
    """Trace calls to the decorated function (sync or async) with their duration."""

    def decorator(func: Callable) -> Callable:
        log = get_detailed_logger(func.__module__, category)

        def finished(started: float) -> None:
            log.debug(f"{func.__name__} finished", elapsed_ms=round((time.perf_counter() - started) * 1000, 2))

        def failed(exc: Exception) -> None:
            log.error(f"{func.__name__} raised", exception=repr(exc))

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    failed(exc)
                    raise
                finished(started)
                return result

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                failed(exc)
                raise
            finished(started)
            return result

        return sync_wrapper

    return decorator


__all__ = [
    "DetailedLogger",
    "LogCategory",
    "detailed_log_function",
    "get_detailed_logger",
]
