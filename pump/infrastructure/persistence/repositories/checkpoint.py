"""Repository for import checkpoints (the watermark log)."""

from attrs import define
from sqlalchemy.ext.asyncio import AsyncSession

from pump.config import get_logger
from pump.domain.entities import ImportCheckpoint
from pump.infrastructure.persistence.database.db_models import DBImportCheckpoint
from pump.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
    ensure_utc,
)
from pump.infrastructure.persistence.repositories.repo_decorator import db_operation

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class CheckpointMapper(BaseModelMapper[DBImportCheckpoint, ImportCheckpoint]):
    """Maps between DBImportCheckpoint and ImportCheckpoint domain models."""

    @staticmethod
    def to_domain(db_model: DBImportCheckpoint) -> ImportCheckpoint:
        return ImportCheckpoint(
            id=db_model.id,
            count=db_model.count,
            timestamp=ensure_utc(db_model.timestamp),
            created_at=ensure_utc(db_model.created_at),
        )

    @staticmethod
    def to_db(domain_model: ImportCheckpoint) -> DBImportCheckpoint:
        return DBImportCheckpoint(
            count=domain_model.count,
            timestamp=domain_model.timestamp,
        )


class CheckpointRepository(BaseRepository[DBImportCheckpoint, ImportCheckpoint]):
    """Append-only access to import checkpoints."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session=session,
            model_class=DBImportCheckpoint,
            mapper=CheckpointMapper(),
        )

    @db_operation("get_latest_checkpoint")
    async def get_latest_checkpoint(self) -> ImportCheckpoint | None:
        """Get the checkpoint with the greatest creation order, if any."""
        stmt = self.select().order_by(DBImportCheckpoint.id.desc()).limit(1)
        result = await self.session.execute(stmt)
        db_model = result.scalar_one_or_none()
        return self.mapper.to_domain(db_model) if db_model else None

    @db_operation("create_checkpoint")
    async def create_checkpoint(self, checkpoint: ImportCheckpoint) -> ImportCheckpoint:
        """Append a new checkpoint. Existing rows are never touched."""
        saved = await self._insert(checkpoint)
        logger.debug(
            f"Created checkpoint {saved.id}",
            count=saved.count,
            timestamp=saved.timestamp.isoformat(),
        )
        return saved
