"""Loguru setup and logging helpers for Pump.

Every module gets its logger through ``get_logger(__name__)``, which binds the
module name so the JSON file sink can be filtered per component. The console
sink stays human readable; ``--verbose`` lowers it to DEBUG and turns on
Loguru's extended tracebacks.
"""

import functools
from pathlib import Path
import sys
from typing import Any

from loguru import logger

from .settings import LoggingConfig, Settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> - "
    "<level>{message}</level>"
)


def setup_loguru_logger(config: LoggingConfig, verbose: bool = False) -> None:
    """Replace Loguru's default handler with Pump's console and file sinks."""
    logger.remove()
    logger.configure(extra={"service": "pump", "module": "pump"})

    logger.add(
        sink=sys.stdout,
        level="DEBUG" if verbose else config.console_log_level.upper(),
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    log_file = Path(config.log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        sink=str(log_file),
        level=config.file_log_level.upper(),
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        backtrace=True,
        diagnose=False,  # locals may hold the API key
        catch=True,
        serialize=True,
    )


def get_logger(name: str) -> Any:
    """Logger bound to the calling module."""
    return logger.bind(module=name, service="pump")


def log_startup_info(settings: Settings) -> None:
    """Log the effective configuration at DEBUG level.

    Secrets are ``SecretStr`` and dump masked.
    """
    startup_logger = get_logger(__name__)
    startup_logger.info("Starting Pump listen history importer")

    for section, values in settings.model_dump().items():
        for key, value in values.items():
            startup_logger.debug(
                "{}.{} = {}",
                section,
                key,
                str(value) if isinstance(value, Path) else value,
            )

    if not settings.lastfm.api_key.get_secret_value():
        startup_logger.warning("Last.fm API key not configured")


def resilient_operation(operation_name=None):
    """Log a failed external call once, with its operation name, and re-raise.

    Nothing is retried; a failed page aborts the import run.

    Example:
        >>> @resilient_operation("fetch_recent_tracks_page")
        >>> async def fetch_page(self, page):
        >>>     ...
    """

    def decorator(func):
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.bind(operation=op_name, error_type=type(e).__name__).error(
                    f"{op_name} failed: {e!s}"
                )
                raise

        return wrapper

    return decorator
