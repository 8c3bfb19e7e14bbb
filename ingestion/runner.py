# ============================================================================
# File: ingestion/runner.py
# Description: Orchestrates one load run over a fixed list of CSV files
# ============================================================================
"""
Load Runner - connectivity check, per-table ingestion, verification.

Run lifecycle:
    DISCONNECTED -> CONNECTED -> INGESTING (per job) -> VERIFYING -> CLOSED

A failure at any point after the engine exists records FAILED, skips the
remaining jobs and still disposes the engine exactly once.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
import logging

from core.config import settings
from core.database import check_connection, classify_db_error
from core.exceptions import ConnectivityError, LoaderException
from core.retry import BackoffPolicy
from ingestion.extractors.csv_source import CSVRowSource
from ingestion.loaders.table_loader import TableLoader
from models.customer import Customer
from models.organization import Organization
from schemas.run import LoadJob, RunState, RunSummary, TableLoadResult
from schemas.tables import TableSchema

logger = logging.getLogger(__name__)


def default_jobs(extract_dir: Optional[str] = None) -> List[LoadJob]:
    """The two dump files, in load order"""
    dump_dir = Path(extract_dir or settings.EXTRACT_DIR) / "dump"
    return [
        LoadJob(
            file_path=str(dump_dir / "customers.csv"),
            table_name=Customer.__tablename__,
            table_schema=TableSchema.from_table(Customer.__table__)
        ),
        LoadJob(
            file_path=str(dump_dir / "organizations.csv"),
            table_name=Organization.__tablename__,
            table_schema=TableSchema.from_table(Organization.__table__)
        ),
    ]


def loader_from_settings(engine: AsyncEngine) -> TableLoader:
    return TableLoader(
        engine,
        max_attempts=settings.MAX_RETRIES,
        base_delay=settings.RETRY_DELAY,
        backoff=BackoffPolicy(settings.RETRY_BACKOFF.lower()),
        progress_interval=settings.PROGRESS_INTERVAL,
        truncate_before_load=settings.TRUNCATE_BEFORE_LOAD
    )


class LoadRunner:
    """
    Orchestrator for one invocation.

    Responsibilities:
    - Verify the database is reachable before touching any table
    - Ingest jobs strictly in order, one transaction per file
    - Stop at the first failed job
    - Count rows per table once every job succeeded
    - Dispose the engine on every exit path
    """

    def __init__(
        self,
        engine: AsyncEngine,
        jobs: Sequence[LoadJob],
        loader: Optional[TableLoader] = None,
        chunk_size: Optional[int] = None
    ):
        self.engine = engine
        self.jobs = list(jobs)
        self.loader = loader or loader_from_settings(engine)
        self.chunk_size = chunk_size or settings.CSV_CHUNK_SIZE
        self.state = RunState.DISCONNECTED
        self._closed = False

    async def run(self) -> RunSummary:
        """
        Run every job and return what happened.

        Errors are logged and reported in the summary rather than raised.
        """
        summary = RunSummary(started_at=datetime.now(timezone.utc))
        current_job: Optional[LoadJob] = None

        try:
            # --------------------------------------------------
            # CONNECT
            # --------------------------------------------------
            try:
                await check_connection(self.engine)
            except ConnectivityError as e:
                logger.error(
                    f"Database connection failed: {e}",
                    extra={"error_context": e.to_dict()}
                )
                logger.error("Exiting due to database connection failure")
                self._fail(summary, e)
                return summary

            self.state = RunState.CONNECTED

            # --------------------------------------------------
            # INGEST
            # --------------------------------------------------
            for job in self.jobs:
                current_job = job
                self.state = RunState.INGESTING
                summary.tables.append(await self._ingest(job))
            current_job = None

            logger.info("All data insertion completed")

            # --------------------------------------------------
            # VERIFY
            # --------------------------------------------------
            self.state = RunState.VERIFYING
            summary.verified_counts = await self._verify_counts()

        except LoaderException as e:
            if current_job is not None:
                e.context.setdefault("table_name", current_job.table_name)
                e.context.setdefault("file_path", current_job.file_path)
            logger.error(
                f"Load run failed: {e}",
                extra={"error_context": e.to_dict()}
            )
            self._fail(summary, e)

        except Exception as e:
            logger.exception("Unexpected error in load run")
            self._fail(
                summary,
                LoaderException(
                    "Unexpected error in load run",
                    context={"table_name": current_job.table_name if current_job else None},
                    original_exception=e
                )
            )

        finally:
            await self._close()
            summary.completed_at = datetime.now(timezone.utc)
            if summary.state != RunState.FAILED:
                summary.state = RunState.CLOSED
            self.state = RunState.CLOSED

        return summary

    async def _ingest(self, job: LoadJob) -> TableLoadResult:
        logger.info(f"Starting to insert {job.table_name} from {job.file_path}")

        source = CSVRowSource(job.file_path, table_schema=job.table_schema, chunk_size=self.chunk_size)
        batch = await source.fetch_batch()

        inserted = await self.loader.load(batch, job.table_name)

        return TableLoadResult(
            table_name=job.table_name,
            file_path=job.file_path,
            records_read=len(batch),
            records_inserted=inserted
        )

    async def _verify_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        async with self.engine.connect() as conn:
            for job in self.jobs:
                try:
                    result = await conn.execute(
                        select(func.count()).select_from(table(job.table_name))
                    )
                except SQLAlchemyError as e:
                    raise classify_db_error(
                        e, context={"operation": "SELECT", "table_name": job.table_name}
                    )
                counts[job.table_name] = result.scalar_one()
                logger.info(f"{job.table_name} in database: {counts[job.table_name]}")
        return counts

    def _fail(self, summary: RunSummary, error: LoaderException) -> None:
        self.state = RunState.FAILED
        summary.state = RunState.FAILED
        summary.error = error.to_dict()

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.engine.dispose()
        logger.info("Database connection closed")
