"""Async entry points wiring the database and Last.fm pager for CLI commands."""

from pump.application.use_cases import ImportListensCommand, ImportListensUseCase
from pump.config import Settings, get_logger
from pump.domain.entities import ImportCheckpoint, ImportListensResult
from pump.infrastructure.connectors.lastfm import LastFMRecentTracksPager
from pump.infrastructure.persistence.database import Database
from pump.infrastructure.persistence.unit_of_work import DatabaseUnitOfWork

logger = get_logger(__name__)


async def run_import(settings: Settings) -> ImportListensResult:
    """Run one incremental import with the configured backend and pager."""
    settings.require_lastfm_credentials()

    database = Database.open(settings.database)
    try:
        await database.migrate()

        pager = LastFMRecentTracksPager(
            config=settings.lastfm,
            timestamp_policy=settings.importer.timestamp_policy,
        )
        async with pager, database.session_factory() as session:
            use_case = ImportListensUseCase(pager=pager)
            return await use_case.execute(
                ImportListensCommand.from_settings(settings.importer),
                DatabaseUnitOfWork(session),
            )
    finally:
        await database.dispose()


async def read_status(settings: Settings) -> tuple[ImportCheckpoint | None, int]:
    """Read the latest checkpoint and the stored track count."""
    database = Database.open(settings.database)
    try:
        await database.migrate()

        async with database.session() as session:
            uow = DatabaseUnitOfWork(session)
            checkpoint = await uow.get_checkpoint_repository().get_latest_checkpoint()
            track_count = await uow.get_track_repository().count()

        logger.debug(
            "Read import status",
            track_count=track_count,
            has_checkpoint=checkpoint is not None,
        )
        return checkpoint, track_count
    finally:
        await database.dispose()
