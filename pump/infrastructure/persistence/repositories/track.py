"""Repository for imported tracks."""

from attrs import define
from sqlalchemy.ext.asyncio import AsyncSession

from pump.config import get_logger
from pump.domain.entities import Track
from pump.infrastructure.persistence.database.db_models import DBTrack
from pump.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
    ensure_utc,
)
from pump.infrastructure.persistence.repositories.repo_decorator import db_operation

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class TrackMapper(BaseModelMapper[DBTrack, Track]):
    """Maps between DBTrack and Track domain models."""

    @staticmethod
    def to_domain(db_model: DBTrack) -> Track:
        return Track(
            id=db_model.id,
            title=db_model.title,
            artist=db_model.artist,
            album=db_model.album,
            listened_at=ensure_utc(db_model.listened_at),
            created_at=ensure_utc(db_model.created_at),
        )

    @staticmethod
    def to_db(domain_model: Track) -> DBTrack:
        return DBTrack(
            title=domain_model.title,
            artist=domain_model.artist,
            album=domain_model.album,
            listened_at=domain_model.listened_at,
        )


class TrackRepository(BaseRepository[DBTrack, Track]):
    """Create-only persistence for tracks.

    No uniqueness is enforced here; deciding what is new is the importer's job.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session, model_class=DBTrack, mapper=TrackMapper())

    @db_operation("create_tracks")
    async def create_many(self, tracks: list[Track]) -> list[Track]:
        """Insert tracks one write at a time within the caller's transaction.

        The first failing write raises; rolling back is left to the
        surrounding unit of work.
        """
        saved = []
        for track in tracks:
            saved.append(await self._insert(track))

        logger.debug(f"Inserted {len(saved)} tracks")
        return saved

    @db_operation("count_tracks")
    async def count(self) -> int:
        """Count active tracks."""
        return await self._count_active()
