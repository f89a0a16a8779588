"""End-to-end import runs against in-memory SQLite with a fake pager.

These exercise the whole write path: the use case, the unit of work, both
repositories and the real transaction.
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import IntegrityError

from pump.application.use_cases import ImportListensCommand, ImportListensUseCase
from pump.domain.entities import ImportCheckpoint, ListenRecord
from pump.infrastructure.persistence.unit_of_work import DatabaseUnitOfWork


def at(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


def broken_listen(seconds: int) -> ListenRecord:
    # title is NOT NULL, so writing this record fails at flush
    return ListenRecord(title=None, artist="Broken", album="", listened_at=at(seconds))


async def run_import(database, pager, command=None):
    async with database.session_factory() as session:
        return await ImportListensUseCase(pager).execute(
            command or ImportListensCommand(), DatabaseUnitOfWork(session)
        )


async def seed_checkpoint(database, seconds: int, count: int = 1):
    async with database.session() as session:
        repo = DatabaseUnitOfWork(session).get_checkpoint_repository()
        await repo.create_checkpoint(ImportCheckpoint(count=count, timestamp=at(seconds)))


async def stored_state(database):
    async with database.session() as session:
        uow = DatabaseUnitOfWork(session)
        track_count = await uow.get_track_repository().count()
        latest = await uow.get_checkpoint_repository().get_latest_checkpoint()
    return track_count, latest


@pytest.fixture
def three_listens(make_listen):
    return [make_listen(300), make_listen(200), make_listen(100)]


class TestImportScenarios:
    async def test_empty_store_imports_everything(
        self, database, make_pager, three_listens
    ):
        result = await run_import(database, make_pager([three_listens]))

        track_count, latest = await stored_state(database)
        assert track_count == 3
        assert (latest.count, latest.timestamp) == (3, at(300))
        assert result.imported_count == 3
        assert [t.listened_at for t in result.tracks] == [at(300), at(200), at(100)]

    async def test_checkpoint_in_the_middle_imports_newer_only(
        self, database, make_pager, three_listens
    ):
        await seed_checkpoint(database, 200)

        result = await run_import(database, make_pager([three_listens]))

        track_count, latest = await stored_state(database)
        assert track_count == 1
        assert (latest.count, latest.timestamp) == (1, at(300))
        assert [t.title for t in result.tracks] == ["Song 300"]

    async def test_checkpoint_at_newest_imports_nothing(
        self, database, make_pager, three_listens
    ):
        await seed_checkpoint(database, 300, count=3)

        result = await run_import(database, make_pager([three_listens]))

        track_count, latest = await stored_state(database)
        assert track_count == 0
        assert (latest.count, latest.timestamp) == (3, at(300))
        assert result.checkpoint is None


class TestImportProperties:
    async def test_rerun_is_idempotent(self, database, make_pager, three_listens):
        await run_import(database, make_pager([three_listens]))
        _, first_checkpoint = await stored_state(database)

        second = await run_import(database, make_pager([three_listens]))

        track_count, latest = await stored_state(database)
        assert second.imported_count == 0
        assert track_count == 3
        assert latest.id == first_checkpoint.id

    async def test_only_records_after_cutoff_are_written(
        self, database, make_pager, make_listen
    ):
        await run_import(database, make_pager([[make_listen(200), make_listen(100)]]))

        result = await run_import(
            database,
            make_pager([[make_listen(400), make_listen(300), make_listen(200)]]),
        )

        assert all(t.listened_at > at(200) for t in result.tracks)
        track_count, latest = await stored_state(database)
        assert track_count == 4
        assert latest.timestamp == at(400)

    async def test_checkpoint_never_moves_backwards(
        self, database, make_pager, make_listen
    ):
        timestamps = []
        for newest in (300, 300, 500, 450, 800):
            await run_import(
                database, make_pager([[make_listen(newest), make_listen(newest - 50)]])
            )
            _, latest = await stored_state(database)
            timestamps.append(latest.timestamp)

        assert timestamps == sorted(timestamps)
        assert timestamps[-1] == at(800)

    @pytest.mark.parametrize("failing_position", [0, 1, 2])
    async def test_failed_write_rolls_back_whole_run(
        self, database, make_pager, make_listen, failing_position
    ):
        records = [make_listen(300), make_listen(200), make_listen(100)]
        records[failing_position] = broken_listen(300 - 100 * failing_position)

        with pytest.raises(IntegrityError):
            await run_import(database, make_pager([records]))

        track_count, latest = await stored_state(database)
        assert track_count == 0
        assert latest is None

    async def test_failed_write_keeps_previous_checkpoint(
        self, database, make_pager, make_listen
    ):
        await seed_checkpoint(database, 100)
        broken = broken_listen(200)

        with pytest.raises(IntegrityError):
            await run_import(database, make_pager([[make_listen(300), broken]]))

        track_count, latest = await stored_state(database)
        assert track_count == 0
        assert latest.timestamp == at(100)

    async def test_epoch_fallback_at_head_does_not_rewind_checkpoint(
        self, database, make_pager, make_listen
    ):
        await run_import(
            database, make_pager([[make_listen(0), make_listen(300), make_listen(200)]])
        )

        _, latest = await stored_state(database)
        assert (latest.count, latest.timestamp) == (3, at(300))

        rerun = await run_import(
            database, make_pager([[make_listen(400), make_listen(300), make_listen(200)]])
        )

        assert [t.listened_at for t in rerun.tracks] == [at(400)]
        track_count, latest = await stored_state(database)
        assert track_count == 4
        assert latest.timestamp == at(400)

    async def test_multi_page_history(self, database, make_pager, make_listen):
        pages = [
            [make_listen(600), make_listen(500)],
            [make_listen(400), make_listen(300)],
            [make_listen(200)],
        ]

        result = await run_import(database, make_pager(pages))

        assert result.pages_fetched == 4
        assert result.imported_count == 5
        _, latest = await stored_state(database)
        assert (latest.count, latest.timestamp) == (5, at(600))
