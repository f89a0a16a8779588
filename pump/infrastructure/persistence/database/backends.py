"""Storage backends selectable by configuration.

A backend is a plain value describing how to reach one database engine: the
SQLAlchemy URL, driver connect arguments, engine options, and an optional
per-connection hook. The two supported engines are registered in ``BACKENDS``
and chosen by the ``PUMP_DB_BACKEND`` setting.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from attrs import define, field
from sqlalchemy import URL
from sqlalchemy.pool import StaticPool

from pump.config import ConfigurationError, DatabaseConfig, get_logger

logger = get_logger(__name__)

SQLITE_MEMORY = ":memory:"


@define(frozen=True, slots=True)
class DatabaseBackend:
    """Connection recipe for one database engine."""

    name: str
    url: URL
    connect_args: dict[str, Any] = field(factory=dict)
    engine_options: dict[str, Any] = field(factory=dict)
    on_connect: Callable[[Any], None] | None = field(default=None, repr=False)

    @property
    def display_url(self) -> str:
        """URL rendered with the password hidden, safe for logs."""
        return self.url.render_as_string(hide_password=True)


def postgres_backend(config: DatabaseConfig) -> DatabaseBackend:
    """Networked PostgreSQL engine via asyncpg."""
    url = URL.create(
        drivername="postgresql+asyncpg",
        username=config.user or None,
        password=config.password.get_secret_value() or None,
        host=config.host,
        port=config.port,
        database=config.name,
    )
    return DatabaseBackend(
        name="postgres",
        url=url,
        engine_options={
            "pool_size": 5,
            "max_overflow": 10,
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        },
    )


def _set_sqlite_pragma(dbapi_connection: Any) -> None:
    """Set SQLite PRAGMAs on connection creation."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA busy_timeout = 30000")
    cursor.execute("PRAGMA journal_mode = WAL")
    cursor.execute("PRAGMA synchronous = NORMAL")
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def sqlite_backend(config: DatabaseConfig) -> DatabaseBackend:
    """Embedded file-based SQLite engine via aiosqlite."""
    database = str(config.path)

    if database == SQLITE_MEMORY:
        # Every pooled connection would otherwise see its own empty database
        engine_options: dict[str, Any] = {"poolclass": StaticPool}
    else:
        Path(database).parent.mkdir(parents=True, exist_ok=True)
        engine_options = {"pool_size": 1, "max_overflow": 2, "pool_timeout": 60}

    return DatabaseBackend(
        name="sqlite",
        url=URL.create(drivername="sqlite+aiosqlite", database=database),
        connect_args={"check_same_thread": False, "timeout": 30.0},
        engine_options=engine_options,
        on_connect=_set_sqlite_pragma,
    )


BACKENDS: dict[str, Callable[[DatabaseConfig], DatabaseBackend]] = {
    "postgres": postgres_backend,
    "sqlite": sqlite_backend,
}


def get_backend(config: DatabaseConfig) -> DatabaseBackend:
    """Resolve the configured backend name to a connection recipe."""
    try:
        factory = BACKENDS[config.backend]
    except KeyError:
        raise ConfigurationError(
            f"Unknown database backend '{config.backend}' "
            f"(expected one of: {', '.join(sorted(BACKENDS))})"
        ) from None

    backend = factory(config)
    logger.debug(f"Selected {backend.name} backend at {backend.display_url}")
    return backend
