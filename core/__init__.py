"""
Core utilities and configuration for the CSV loader.

Modules:
    config: Application configuration and environment variable management
    database: Engine construction, liveness probe, driver error mapping
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration
    retry: Retry controller for transient lock errors

Usage:
    from core.config import settings
    from core.database import create_engine, check_connection
    from core.exceptions import ParseError, TransientLockError
    from core.logging import setup_logging
    from core.retry import retry_operation, BackoffPolicy

Example:
    setup_logging()
    engine = create_engine()
    try:
        await check_connection(engine)
    finally:
        await engine.dispose()
"""

__all__ = [
    "settings",
    "create_engine",
    "check_connection",
    "setup_logging",
    "retry_operation",
    "BackoffPolicy",
    # Exceptions
    "LoaderException",
    "RetryableError",
    "NonRetryableError",
    "ConnectivityError",
    "ExtractionError",
    "ParseError",
    "ArchiveError",
    "LoadError",
    "DatabaseError",
    "TransientLockError",
    "ConstraintViolationError",
    "RetriesExhausted",
]
