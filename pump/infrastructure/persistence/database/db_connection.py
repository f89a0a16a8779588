"""SQLAlchemy engine and session management.

This module is responsible for:
- Engine creation from a configured storage backend
- Session factory configuration
- Session lifecycle with commit/rollback handling

Nothing here is a module-level singleton: a ``Database`` is opened once at
startup and passed to whoever needs it.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pump.config import DatabaseConfig, get_logger
from pump.infrastructure.persistence.database.backends import (
    DatabaseBackend,
    get_backend,
)
from pump.infrastructure.persistence.database.db_models import init_db

logger = get_logger(__name__)


def create_db_engine(backend: DatabaseBackend, echo: bool = False) -> AsyncEngine:
    """Create an async SQLAlchemy engine for the given backend."""
    engine = create_async_engine(
        backend.url,
        connect_args=backend.connect_args,
        echo=echo,
        **backend.engine_options,
    )

    if backend.on_connect is not None:
        hook = backend.on_connect

        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, _):  # pragma: no cover
            hook(dbapi_connection)

    logger.info(f"Created {backend.name} database engine")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the engine."""
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Domain mapping happens after commit
        autoflush=True,
        autocommit=False,
    )


@asynccontextmanager
async def get_session(
    session_factory: async_sessionmaker[AsyncSession],
    rollback: bool = True,
) -> AsyncGenerator[AsyncSession]:
    """Get an asynchronous database session with automatic transaction management.

    Commits when the block exits cleanly, rolls back on exception.

    Args:
        session_factory: Factory produced by create_session_factory
        rollback: If True (default), automatically rolls back on exception.

    Yields:
        AsyncSession: Managed database session
    """
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        if rollback:
            await session.rollback()
        raise
    finally:
        await session.close()


class Database:
    """An opened storage backend: engine, session factory and schema migration."""

    def __init__(self, backend: DatabaseBackend, echo: bool = False) -> None:
        self.backend = backend
        self.engine = create_db_engine(backend, echo=echo)
        self.session_factory = create_session_factory(self.engine)

    @classmethod
    def open(cls, config: DatabaseConfig) -> "Database":
        """Open the backend selected by configuration."""
        return cls(get_backend(config), echo=config.echo)

    async def migrate(self) -> None:
        """Bring the schema up to date. Idempotent."""
        await init_db(self.engine)

    def session(self):
        """Session context manager bound to this database."""
        return get_session(self.session_factory)

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.debug(f"Disposed {self.backend.name} database engine")
