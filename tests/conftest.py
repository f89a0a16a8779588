from datetime import UTC, datetime
from pathlib import Path

import pytest

from pump.config import DatabaseConfig
from pump.domain.entities import ListenRecord
from pump.infrastructure.persistence.database import Database, sqlite_backend


def ts(seconds: int) -> datetime:
    """Aware UTC datetime for a Unix timestamp."""
    return datetime.fromtimestamp(seconds, tz=UTC)


class FakePager:
    """In-memory pager serving fixed pages, recording requested page numbers."""

    def __init__(self, pages: list[list[ListenRecord]]) -> None:
        self.pages = pages
        self.requested: list[int] = []

    async def fetch_page(self, page: int) -> list[ListenRecord]:
        self.requested.append(page)
        if page > len(self.pages):
            return []
        return list(self.pages[page - 1])


@pytest.fixture
def make_listen():
    """Factory for listen records keyed by Unix seconds."""

    def _make(seconds: int, title: str | None = None) -> ListenRecord:
        return ListenRecord(
            title=title if title is not None else f"Song {seconds}",
            artist=f"Artist {seconds}",
            album=f"Album {seconds}",
            listened_at=ts(seconds),
        )

    return _make


@pytest.fixture
def make_pager():
    """Factory for FakePager instances."""
    return FakePager


@pytest.fixture
async def database():
    """Migrated in-memory SQLite database."""
    config = DatabaseConfig(_env_file=None, backend="sqlite", path=Path(":memory:"))
    db = Database(sqlite_backend(config))
    await db.migrate()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database):
    """Provide a database session, rolled back at teardown."""
    async with database.session_factory() as session:
        yield session
        await session.rollback()
