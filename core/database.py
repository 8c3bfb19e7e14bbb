"""
Database engine management with SQLAlchemy async
"""

from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from core.config import settings
from core.exceptions import (
    ConnectivityError,
    ConstraintViolationError,
    DatabaseError,
    TransientLockError,
)
import logging

logger = logging.getLogger(__name__)

# Messages SQLite reports for SQLITE_BUSY / SQLITE_LOCKED
_LOCK_MARKERS = ("database is locked", "database table is locked", "database is busy", "sqlite_busy")


def create_engine(database_url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for one run.

    Pool bounds only apply to file-backed databases; in-memory SQLite
    runs on a static single-connection pool.
    """
    url = make_url(database_url or settings.DATABASE_URL)

    engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}
    if url.database and url.database != ":memory:":
        engine_kwargs["pool_size"] = settings.DB_POOL_SIZE
        engine_kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW

    return create_async_engine(url, **engine_kwargs)


async def check_connection(engine: AsyncEngine) -> None:
    """
    Issue a trivial liveness probe.

    Raises:
        ConnectivityError: If storage cannot be reached
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        raise ConnectivityError(
            "Database liveness probe failed",
            context={"database_url": engine.url.render_as_string(hide_password=True)},
            original_exception=e
        )
    logger.info("Database connected successfully")


def is_lock_error(exc: BaseException) -> bool:
    """True for SQLite busy/locked conditions."""
    if not isinstance(exc, OperationalError):
        return False
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _LOCK_MARKERS)


def classify_db_error(
    exc: SQLAlchemyError,
    context: Optional[Dict[str, Any]] = None
) -> DatabaseError:
    """Map a driver error onto the loader's exception hierarchy."""
    if is_lock_error(exc):
        return TransientLockError("Database is locked", context=context, original_exception=exc)

    if isinstance(exc, IntegrityError):
        return ConstraintViolationError("Constraint violation", context=context, original_exception=exc)

    return DatabaseError("Database operation failed", context=context, original_exception=exc)
