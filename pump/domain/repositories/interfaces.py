"""Repository and connector interfaces used by the import use case.

These protocols keep the application layer independent of SQLAlchemy and
requests; the infrastructure layer provides the implementations.
"""

from collections.abc import Awaitable
from typing import Protocol, Self

from pump.domain.entities import ImportCheckpoint, ListenRecord, Track


class ListenPagerProtocol(Protocol):
    """Source of listen records, one page per call, newest first."""

    def fetch_page(self, page: int) -> Awaitable[list[ListenRecord]]:
        """Fetch a single page (1-based) of listen records."""
        ...


class TrackRepositoryProtocol(Protocol):
    """Repository interface for persisted tracks."""

    def create_many(self, tracks: list[Track]) -> Awaitable[list[Track]]:
        """Insert tracks within the current transaction."""
        ...

    def count(self) -> Awaitable[int]:
        """Count active tracks."""
        ...


class CheckpointRepositoryProtocol(Protocol):
    """Repository interface for import checkpoints (append only)."""

    def get_latest_checkpoint(self) -> Awaitable[ImportCheckpoint | None]:
        """Get the most recently created checkpoint."""
        ...

    def create_checkpoint(
        self, checkpoint: ImportCheckpoint
    ) -> Awaitable[ImportCheckpoint]:
        """Append a new checkpoint."""
        ...


class UnitOfWorkProtocol(Protocol):
    """Transaction boundary shared by all repositories of one import run."""

    async def __aenter__(self) -> Self:
        """Enter the transaction scope."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Commit on success, roll back on error."""
        ...

    async def commit(self) -> None:
        """Commit the transaction."""
        ...

    async def rollback(self) -> None:
        """Roll back the transaction."""
        ...

    def get_track_repository(self) -> TrackRepositoryProtocol:
        """Get the track repository bound to this transaction."""
        ...

    def get_checkpoint_repository(self) -> CheckpointRepositoryProtocol:
        """Get the checkpoint repository bound to this transaction."""
        ...
