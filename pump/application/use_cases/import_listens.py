"""Incremental listen import use case.

Pages through the remote listen history, keeps only the records newer than
the latest import checkpoint, and stores them together with a new checkpoint
in a single transaction.
"""

from datetime import datetime
import time
from typing import Self

from attrs import define, field, validators

from pump.config import ImporterConfig, get_logger
from pump.domain.entities import (
    ImportCheckpoint,
    ImportListensResult,
    ListenRecord,
    Track,
    cutoff_for,
)
from pump.domain.repositories import ListenPagerProtocol, UnitOfWorkProtocol

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class ImportListensCommand:
    """Command for one incremental import run.

    Attributes:
        max_pages: Upper bound on remote pages fetched in one run
        stop_early: End paging at an empty page or once a page reaches the cutoff
    """

    max_pages: int = field(default=50, validator=validators.ge(1))
    stop_early: bool = True

    @classmethod
    def from_settings(cls, config: ImporterConfig) -> Self:
        return cls(max_pages=config.max_pages, stop_early=config.stop_early)


@define(slots=True)
class ImportListensUseCase:
    """Use case for importing new listens from a remote pager.

    The pager is the only constructor dependency; the transaction boundary is
    passed to ``execute`` as a unit of work.
    """

    pager: ListenPagerProtocol

    async def execute(
        self, command: ImportListensCommand, uow: UnitOfWorkProtocol
    ) -> ImportListensResult:
        """Run one import.

        Args:
            command: Paging policy for this run
            uow: Unit of work providing the repositories and the transaction

        Returns:
            Counts of fetched and imported records plus the old and new checkpoint

        Raises:
            Any pager error before a write happens, or any persistence error
            after the whole run has been rolled back.
        """
        start_time = time.time()

        with logger.contextualize(
            operation="import_listens_use_case",
            max_pages=command.max_pages,
        ):
            # Own transaction; nothing is held open while pages are fetched
            async with uow:
                previous = await uow.get_checkpoint_repository().get_latest_checkpoint()
            cutoff = cutoff_for(previous)

            if previous:
                logger.info(f"Importing listens newer than {cutoff.isoformat()}")
            else:
                logger.info("No checkpoint found, importing full history")

            pages_fetched, records = await self._fetch_pages(command, cutoff)
            new_tracks = self._select_new(records, cutoff)

            async with uow:
                checkpoint = None
                saved: list[Track] = []
                if new_tracks:
                    logger.info(f"Saving {len(new_tracks)} tracks")
                    saved = await uow.get_track_repository().create_many(new_tracks)
                    checkpoint = await uow.get_checkpoint_repository().create_checkpoint(
                        ImportCheckpoint(
                            count=len(saved),
                            timestamp=max(t.listened_at for t in saved),
                        )
                    )
                else:
                    logger.info("No new listens to import")

                await uow.commit()

            execution_time_ms = int((time.time() - start_time) * 1000)
            logger.info(
                f"Import complete: {len(saved)} of {len(records)} fetched listens imported",
                pages_fetched=pages_fetched,
                execution_time_ms=execution_time_ms,
            )

            return ImportListensResult(
                pages_fetched=pages_fetched,
                records_fetched=len(records),
                imported_count=len(saved),
                previous_checkpoint=previous,
                checkpoint=checkpoint,
                execution_time_ms=execution_time_ms,
                tracks=saved,
            )

    async def _fetch_pages(
        self, command: ImportListensCommand, cutoff: datetime
    ) -> tuple[int, list[ListenRecord]]:
        """Fetch pages sequentially, accumulating records in remote order."""
        records: list[ListenRecord] = []
        pages_fetched = 0

        for page in range(1, command.max_pages + 1):
            logger.info(f"Fetching page {page}")
            batch = await self.pager.fetch_page(page)
            pages_fetched += 1
            records.extend(batch)

            if not command.stop_early:
                continue
            if not batch:
                logger.debug(f"Page {page} is empty, history exhausted")
                break
            # Pages are newest first, so every later page is older still
            if batch[-1].listened_at <= cutoff:
                logger.debug(f"Page {page} reaches the checkpoint, stopping")
                break

        return pages_fetched, records

    @staticmethod
    def _select_new(records: list[ListenRecord], cutoff: datetime) -> list[Track]:
        """Take records newest first up to the first one at or below the cutoff."""
        new_tracks = []
        for record in records:
            if record.listened_at <= cutoff:
                break
            new_tracks.append(Track.from_listen(record))
        return new_tracks
