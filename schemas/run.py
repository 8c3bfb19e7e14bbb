"""
Pydantic schemas describing load jobs and run results
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import enum

from pydantic import BaseModel, Field

from schemas.tables import TableSchema


class RunState(str, enum.Enum):
    """Lifecycle of one load run"""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    INGESTING = "ingesting"
    VERIFYING = "verifying"
    FAILED = "failed"
    CLOSED = "closed"


class LoadJob(BaseModel):
    """One (file, table) pair to ingest"""
    file_path: str
    table_name: str = Field(..., min_length=1)
    table_schema: Optional[TableSchema] = None


class TableLoadResult(BaseModel):
    """Outcome of ingesting one file"""
    table_name: str
    file_path: str
    records_read: int = 0
    records_inserted: int = 0


class RunSummary(BaseModel):
    """
    What a run did.

    ``state`` is CLOSED for a successful run and FAILED when the run aborted;
    the database handle has been released in both cases.
    """
    state: RunState = RunState.DISCONNECTED
    started_at: datetime
    completed_at: Optional[datetime] = None
    tables: List[TableLoadResult] = Field(default_factory=list)
    verified_counts: Dict[str, int] = Field(default_factory=dict)
    error: Optional[Dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.state == RunState.CLOSED
