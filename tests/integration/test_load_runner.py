"""
Integration tests for complete load runs
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from core.database import create_engine
from core.exceptions import ConnectivityError, TransientLockError
from ingestion.loaders.table_loader import TableLoader
from ingestion.runner import LoadRunner, default_jobs
from schemas.run import LoadJob, RunState


class LockedFirstLoader(TableLoader):
    """Every insert of the first ``failures`` attempts hits a lock"""

    def __init__(self, *args, failures: int, **kwargs):
        super().__init__(*args, **kwargs)
        self.failures = failures
        self.attempts = 0

    async def insert_batch(self, batch, table_name):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise TransientLockError("Database is locked", context={"table_name": table_name})
        return await super().insert_batch(batch, table_name)


@pytest.mark.asyncio
async def test_blank_line_produces_no_row(test_engine, write_csv, count_rows):
    """
    Scenario A: id,name with rows Alice / Bob / blank / Carol loads 3 rows
    """
    path = write_csv("people.csv", "id,name\n1,Alice\n2,Bob\n\n3,Carol\n")
    runner = LoadRunner(
        test_engine,
        [LoadJob(file_path=str(path), table_name="people")],
        loader=TableLoader(test_engine, base_delay=0)
    )

    summary = await runner.run()

    assert summary.state == RunState.CLOSED
    assert summary.succeeded
    assert summary.error is None
    assert summary.tables[0].records_read == 3
    assert summary.tables[0].records_inserted == 3
    assert summary.verified_counts == {"people": 3}
    assert await count_rows(test_engine, "people") == 3


@pytest.mark.asyncio
async def test_constraint_violation_aborts_remaining_files(test_engine, write_csv, count_rows):
    """
    Scenario B: duplicate key on the first file's second row rolls the first
    table back and the second file is never attempted
    """
    first = write_csv("people.csv", "id,name\n1,Alice\n1,Bob\n2,Carol\n")
    second = write_csv("pets.csv", "id,name\n1,Rex\n")

    loader = TableLoader(test_engine, base_delay=0)
    runner = LoadRunner(
        test_engine,
        [
            LoadJob(file_path=str(first), table_name="people"),
            LoadJob(file_path=str(second), table_name="pets"),
        ],
        loader=loader
    )

    with patch.object(loader, "load", wraps=loader.load) as load_spy:
        summary = await runner.run()

    assert summary.state == RunState.FAILED
    assert not summary.succeeded
    assert summary.error["error_type"] == "ConstraintViolationError"
    assert summary.error["context"]["table_name"] == "people"
    assert summary.verified_counts == {}
    assert load_spy.call_count == 1
    assert await count_rows(test_engine, "people") == 0
    assert await count_rows(test_engine, "pets") == 0


@pytest.mark.asyncio
async def test_transient_lock_then_success_commits_once(test_engine, write_csv, fetch_ids):
    """
    Scenario C: locked on 2 of 5 allowed attempts, succeeds on the 3rd
    """
    path = write_csv("people.csv", "id,name\n1,Alice\n2,Bob\n3,Carol\n")
    loader = LockedFirstLoader(test_engine, failures=2, max_attempts=5, base_delay=0)
    runner = LoadRunner(test_engine, [LoadJob(file_path=str(path), table_name="people")], loader=loader)

    summary = await runner.run()

    assert summary.succeeded
    assert loader.attempts == 3
    assert summary.verified_counts == {"people": 3}
    assert await fetch_ids(test_engine, "people") == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_retries_exhausted_fails_run(test_engine, write_csv, count_rows):
    path = write_csv("people.csv", "id,name\n1,Alice\n")
    loader = LockedFirstLoader(test_engine, failures=99, max_attempts=5, base_delay=0)
    runner = LoadRunner(test_engine, [LoadJob(file_path=str(path), table_name="people")], loader=loader)

    summary = await runner.run()

    assert summary.state == RunState.FAILED
    assert summary.error["error_type"] == "RetriesExhausted"
    assert summary.error["context"]["attempts"] == 5
    assert loader.attempts == 5
    assert await count_rows(test_engine, "people") == 0


@pytest.mark.asyncio
async def test_parse_error_keeps_previous_file_committed(test_engine, write_csv, count_rows):
    good = write_csv("people.csv", "id,name\n1,Alice\n")
    bad = write_csv("pets.csv", "id,name\n1,Rex\n2,Fido,extra\n")

    runner = LoadRunner(
        test_engine,
        [
            LoadJob(file_path=str(good), table_name="people"),
            LoadJob(file_path=str(bad), table_name="pets"),
        ],
        loader=TableLoader(test_engine, base_delay=0)
    )

    summary = await runner.run()

    assert summary.state == RunState.FAILED
    assert summary.error["error_type"] == "ParseError"
    assert summary.error["context"]["table_name"] == "pets"
    assert [t.table_name for t in summary.tables] == ["people"]
    assert await count_rows(test_engine, "people") == 1
    assert await count_rows(test_engine, "pets") == 0


@pytest.mark.asyncio
async def test_connectivity_failure_touches_nothing(tmp_path):
    """
    Scenario D: probe fails, no ingestion, engine still released once
    """
    engine = MagicMock()
    engine.dispose = AsyncMock()
    loader = MagicMock()
    loader.load = AsyncMock()

    runner = LoadRunner(
        engine,
        [LoadJob(file_path=str(tmp_path / "people.csv"), table_name="people")],
        loader=loader
    )

    with patch(
        "ingestion.runner.check_connection",
        AsyncMock(side_effect=ConnectivityError("Database liveness probe failed"))
    ):
        summary = await runner.run()

    assert summary.state == RunState.FAILED
    assert summary.error["error_type"] == "ConnectivityError"
    assert summary.tables == []
    loader.load.assert_not_awaited()
    engine.dispose.assert_awaited_once()
    assert runner.state == RunState.CLOSED


@pytest.mark.asyncio
async def test_unreachable_database_returns_without_raising(tmp_path, write_csv):
    path = write_csv("people.csv", "id,name\n1,Alice\n")
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")

    summary = await LoadRunner(engine, [LoadJob(file_path=str(path), table_name="people")]).run()

    assert summary.state == RunState.FAILED
    assert summary.error["error_type"] == "ConnectivityError"
    assert summary.completed_at is not None


@pytest.mark.asyncio
async def test_engine_disposed_once_after_unexpected_error(tmp_path, write_csv):
    path = write_csv("people.csv", "id,name\n1,Alice\n")
    engine = MagicMock()
    engine.dispose = AsyncMock()
    loader = MagicMock()
    loader.load = AsyncMock(side_effect=RuntimeError("boom"))

    runner = LoadRunner(engine, [LoadJob(file_path=str(path), table_name="people")], loader=loader)

    with patch("ingestion.runner.check_connection", AsyncMock()):
        summary = await runner.run()

    assert summary.state == RunState.FAILED
    assert summary.error["error_type"] == "LoaderException"
    assert summary.error["original_error"] == "boom"
    engine.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_default_jobs_load_dump_layout(test_engine, tmp_path, write_csv, customers_csv, organizations_csv):
    write_csv("extracted/dump/customers.csv", customers_csv)
    write_csv("extracted/dump/organizations.csv", organizations_csv)

    jobs = default_jobs(str(tmp_path / "extracted"))
    runner = LoadRunner(test_engine, jobs, loader=TableLoader(test_engine, base_delay=0))

    summary = await runner.run()

    assert [job.table_name for job in jobs] == ["customers", "organizations"]
    assert summary.succeeded
    assert summary.verified_counts == {"customers": 2, "organizations": 3}
