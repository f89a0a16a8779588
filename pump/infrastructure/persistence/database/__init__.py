"""Database layer for Pump.

Usage:
------
1. Open the configured backend and migrate the schema:
    database = Database.open(settings.database)
    await database.migrate()

2. Get a session:
    async with database.session() as session:
        result = await session.execute(DBTrack.active_records())
"""

from pump.infrastructure.persistence.database.backends import (
    BACKENDS,
    DatabaseBackend,
    get_backend,
    postgres_backend,
    sqlite_backend,
)
from pump.infrastructure.persistence.database.db_connection import (
    Database,
    create_db_engine,
    create_session_factory,
    get_session,
)
from pump.infrastructure.persistence.database.db_models import (
    DBImportCheckpoint,
    DBTrack,
    PumpDBBase,
    init_db,
)

__all__ = [
    "BACKENDS",
    "DBImportCheckpoint",
    "DBTrack",
    "Database",
    "DatabaseBackend",
    "PumpDBBase",
    "create_db_engine",
    "create_session_factory",
    "get_backend",
    "get_session",
    "init_db",
    "postgres_backend",
    "sqlite_backend",
]
