"""
Load pipeline components.

Modules:
    archive: Download and unpack the input archive
    runner: Orchestrator for one load run

Subpackages:
    extractors: CSV row source
    loaders: Transactional table loader

Architecture:
    The run is strictly sequential:

    1. Connect - liveness probe; a failure ends the run before any table is touched
    2. Ingest - for each (file, table): read the whole file, then insert it
       in one transaction, retrying the transaction on lock contention
    3. Verify - count rows per table

    The engine is disposed on every exit path.

Usage:
    from core.database import create_engine
    from ingestion.runner import LoadRunner, default_jobs

Example:
    runner = LoadRunner(create_engine(), default_jobs())
    summary = await runner.run()

    print(summary.verified_counts)

Error Handling:
    All components raise exceptions from core.exceptions. Only
    TransientLockError is retried; anything else aborts the current file's
    transaction and the remaining files.
"""

__all__ = [
    "CSVRowSource",
    "TableLoader",
    "LoadRunner",
    "default_jobs",
    "download_archive",
    "extract_archive",
]
