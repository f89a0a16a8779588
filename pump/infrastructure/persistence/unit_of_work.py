"""Database Unit of Work implementation for transaction boundary management.

Every repository handed out by a unit of work shares its session, so track
inserts and the checkpoint append of one import run commit or roll back
together.
"""

from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession

from pump.config import get_logger
from pump.domain.repositories.interfaces import (
    CheckpointRepositoryProtocol,
    TrackRepositoryProtocol,
)
from pump.infrastructure.persistence.repositories.checkpoint import (
    CheckpointRepository,
)
from pump.infrastructure.persistence.repositories.track import TrackRepository

logger = get_logger(__name__)


class DatabaseUnitOfWork:
    """Database implementation of the Unit of Work pattern.

    The unit of work automatically commits on successful exit or rolls back on
    exceptions, but also allows explicit commit/rollback control.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._committed = False

    async def __aenter__(self) -> Self:
        # Each entry is a new transaction on the same session
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit with automatic commit/rollback.

        If an exception occurred, roll back. Otherwise commit unless commit
        was already called explicitly.
        """
        if exc_type is not None:
            logger.warning(f"Rolling back import transaction after {exc_type.__name__}")
            await self.rollback()
        elif not self._committed:
            await self.commit()

    async def commit(self) -> None:
        """Explicitly commit the current transaction."""
        await self._session.commit()
        self._committed = True

    async def rollback(self) -> None:
        """Explicitly rollback the current transaction."""
        await self._session.rollback()

    def get_track_repository(self) -> TrackRepositoryProtocol:
        """Get track repository using this unit of work's transaction."""
        return TrackRepository(self._session)

    def get_checkpoint_repository(self) -> CheckpointRepositoryProtocol:
        """Get checkpoint repository using this unit of work's transaction."""
        return CheckpointRepository(self._session)
