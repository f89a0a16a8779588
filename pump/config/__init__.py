"""Configuration module for Pump.

Public API:
----------
load_settings(env_file=".env") -> Settings
    Read configuration from the environment once at startup

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(config: LoggingConfig, verbose: bool = False) -> None
    Configure Loguru logger for the application

resilient_operation(operation_name: str)
    Decorator for logging errors in external API calls

log_startup_info(settings: Settings) -> None
    Log configuration at startup

Usage:
------
```python
from pump.config import get_logger, load_settings

settings = load_settings()
logger = get_logger(__name__)
logger.info("Importing up to {} pages", settings.importer.max_pages)
```
"""

from .logging import (
    get_logger,
    log_startup_info,
    resilient_operation,
    setup_loguru_logger,
)
from .settings import (
    ConfigurationError,
    DatabaseConfig,
    ImporterConfig,
    LastFMConfig,
    LoggingConfig,
    Settings,
    load_settings,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "ImporterConfig",
    "LastFMConfig",
    "LoggingConfig",
    "Settings",
    "get_logger",
    "load_settings",
    "log_startup_info",
    "resilient_operation",
    "setup_loguru_logger",
]
