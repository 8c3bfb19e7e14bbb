"""
Insert a batch of CSV records into one table as a single transaction
"""

from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy import column, delete, insert, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.sql.expression import TableClause

from core.database import classify_db_error
from core.retry import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    BackoffPolicy,
    retry_operation,
)
import logging

logger = logging.getLogger(__name__)

Record = Dict[str, str]
ProgressCallback = Callable[[str, int], None]

DEFAULT_PROGRESS_INTERVAL = 1000


class TableLoader:
    """
    Load records into a table with all-or-nothing semantics.

    Ensures:
    - One transaction per batch; any failed insert rolls back the whole batch
    - Records are inserted one statement at a time, in batch order
    - Transient lock errors re-run the whole batch under the retry controller
    - Progress is reported every ``progress_interval`` inserted records
    """

    def __init__(
        self,
        engine: AsyncEngine,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        backoff: BackoffPolicy = BackoffPolicy.FIXED,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        truncate_before_load: bool = False,
        on_progress: Optional[ProgressCallback] = None
    ):
        if progress_interval < 1:
            raise ValueError("progress_interval must be positive")

        self.engine = engine
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.backoff = backoff
        self.progress_interval = progress_interval
        self.truncate_before_load = truncate_before_load
        self.on_progress = on_progress

    async def load(self, batch: List[Record], table_name: str) -> int:
        """
        Insert ``batch`` into ``table_name``, retrying on lock contention.

        Args:
            batch: Fully materialized records for one file
            table_name: Destination table

        Returns:
            Number of records inserted

        Raises:
            ConstraintViolationError: Integrity failure, not retried
            RetriesExhausted: Still locked after the last attempt
            DatabaseError: Any other database failure
        """
        async def attempt() -> int:
            return await self.insert_batch(batch, table_name)

        inserted = await retry_operation(
            attempt,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            backoff=self.backoff,
            operation_name=f"insert_batch({table_name})",
            context={"table_name": table_name, "records_in_batch": len(batch)}
        )

        logger.info(f"Finished inserting {inserted} records into {table_name}")
        return inserted

    async def insert_batch(self, batch: List[Record], table_name: str) -> int:
        """
        One attempt: open a transaction, insert every record, commit.

        The inserted counter is local to the attempt, so a retried batch
        starts again from zero.
        """
        if not batch and not self.truncate_before_load:
            logger.info(f"No records to insert into {table_name}")
            return 0

        target = self._target_table(table_name, batch[0].keys() if batch else [])
        inserted = 0

        try:
            async with self.engine.begin() as conn:
                if self.truncate_before_load:
                    await conn.execute(delete(target))

                for record in batch:
                    await self._insert_record(conn, target, record)
                    inserted += 1

                    if inserted % self.progress_interval == 0:
                        self._report_progress(table_name, inserted)

        except SQLAlchemyError as e:
            raise classify_db_error(
                e,
                context={
                    "operation": "INSERT",
                    "table_name": table_name,
                    "record_number": inserted + 1,
                    "records_in_batch": len(batch)
                }
            )

        return inserted

    async def _insert_record(self, conn: AsyncConnection, target: TableClause, record: Record) -> None:
        await conn.execute(insert(target), record)

    def _target_table(self, table_name: str, column_names: Sequence[str]) -> TableClause:
        # Untyped columns: values are bound as the strings read from the file
        return table(table_name, *(column(name) for name in column_names))

    def _report_progress(self, table_name: str, inserted: int) -> None:
        logger.info(f"Inserted {inserted} records into {table_name}")
        if self.on_progress is not None:
            self.on_progress(table_name, inserted)
