"""Repository base classes for SQLAlchemy 2.0 async persistence."""

from datetime import UTC, datetime
from typing import Any, Generic, Protocol, TypeVar

from attrs import define
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pump.config import get_logger
from pump.infrastructure.persistence.database.db_models import PumpDBBase

logger = get_logger(__name__)

TDBModel = TypeVar("TDBModel", bound=PumpDBBase)
TDomainModel = TypeVar("TDomainModel")


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from engines without tz storage.

    SQLite drops the offset on write; every timestamp this application stores
    is UTC, so a naive value read back is UTC by construction.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class ModelMapper(Protocol[TDBModel, TDomainModel]):
    """Protocol for bidirectional mapping between models."""

    @staticmethod
    def to_domain(db_model: TDBModel) -> TDomainModel:
        """Convert database model to domain model."""
        ...

    @staticmethod
    def to_db(domain_model: TDomainModel) -> TDBModel:
        """Convert domain model to database model."""
        ...


@define(frozen=True, slots=True)
class BaseModelMapper(Generic[TDBModel, TDomainModel]):
    """Base implementation of ModelMapper.

    Usage:
        @define(frozen=True, slots=True)
        class TrackMapper(BaseModelMapper[DBTrack, Track]):
            @staticmethod
            def to_domain(db_model: DBTrack) -> Track:
                return Track(...)

            @staticmethod
            def to_db(domain_model: Track) -> DBTrack:
                return DBTrack(...)
    """

    @staticmethod
    def to_domain(db_model: TDBModel) -> TDomainModel:
        """Subclasses convert a row into its domain value."""
        raise NotImplementedError("Subclasses must implement to_domain")

    @staticmethod
    def to_db(domain_model: TDomainModel) -> TDBModel:
        """Subclasses convert a domain value into a new row."""
        raise NotImplementedError("Subclasses must implement to_db")


class BaseRepository(Generic[TDBModel, TDomainModel]):
    """Base repository holding the shared session, model class and mapper."""

    def __init__(
        self,
        session: AsyncSession,
        model_class: type[TDBModel],
        mapper: ModelMapper[TDBModel, TDomainModel],
    ) -> None:
        self.session = session
        self.model_class = model_class
        self.mapper = mapper
        logger.debug(
            f"Initialized {self.__class__.__name__} for {model_class.__name__}",
        )

    def select(self, *columns: Any) -> Select[tuple[Any, ...]]:
        """Create select statement for active records."""
        stmt = select(*columns) if columns else select(self.model_class)
        return stmt.where(self.model_class.is_deleted == False)  # noqa: E712

    async def _insert(self, domain_model: TDomainModel) -> TDomainModel:
        """Add one row and flush it so failures surface at this write."""
        db_model = self.mapper.to_db(domain_model)
        self.session.add(db_model)
        await self.session.flush()
        return self.mapper.to_domain(db_model)

    async def _count_active(self) -> int:
        """Count non-deleted rows."""
        stmt = self.select(func.count(self.model_class.id))
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
