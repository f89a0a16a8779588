"""Timing and failure logging for repository methods.

A failed query is logged once, tagged with its category, and then re-raised
as is. Rollback belongs to the unit of work that owns the session.
"""

from collections.abc import Callable, Coroutine
import functools
import inspect
import time
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.exc import (
    DatabaseError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)

from pump.config import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# Most specific first; IntegrityError subclasses DatabaseError
_ERROR_CATEGORIES: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "integrity", "WARNING"),
    (OperationalError, "operational", "ERROR"),
    (DatabaseError, "database", "ERROR"),
    (SQLAlchemyError, "sqlalchemy", "ERROR"),
)


def _categorize(error: SQLAlchemyError) -> tuple[str, str]:
    for error_type, category, level in _ERROR_CATEGORIES:
        if isinstance(error, error_type):
            return category, level
    return "sqlalchemy", "ERROR"


def _loggable_kwargs(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Keep scalar keyword arguments; entities and sessions stay out of logs."""
    return {
        key: value
        for key, value in kwargs.items()
        if not key.startswith("_") and isinstance(value, int | str | float | bool)
    }


def db_operation(operation_name: str | None = None):
    """Wrap an async repository method with timing and failure logging.

    Args:
        operation_name: Name used in log records, defaults to the method name

    Example:
        @db_operation("count_tracks")
        async def count(self) -> int:
            ...
    """

    def decorator(
        func: Callable[P, Coroutine[Any, Any, T]],
    ) -> Callable[P, Coroutine[Any, Any, T]]:
        op_name = operation_name or func.__name__

        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"db_operation requires an async method, {op_name} is sync")

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            owner = type(args[0]).__name__ if args else "repository"
            op_logger = logger.bind(operation=op_name, **_loggable_kwargs(kwargs))
            started = time.perf_counter()

            try:
                result = await func(*args, **kwargs)
            except SQLAlchemyError as e:
                category, level = _categorize(e)
                op_logger.bind(error=str(e), category=category).log(
                    level,
                    f"{owner}.{op_name} failed ({category})",
                    exec_time_ms=(time.perf_counter() - started) * 1000,
                )
                raise

            op_logger.trace(
                f"{owner}.{op_name} done",
                exec_time_ms=(time.perf_counter() - started) * 1000,
            )
            return result

        return wrapper

    return decorator
