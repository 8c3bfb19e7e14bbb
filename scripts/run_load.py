"""
Script to load the extracted CSV dump into the database
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from core.config import settings
from core.database import create_engine
from core.logging import setup_logging
from ingestion.runner import LoadRunner, default_jobs
from schemas.run import RunSummary

logger = logging.getLogger(__name__)


async def run_load(database_url: Optional[str] = None, extract_dir: Optional[str] = None) -> RunSummary:
    """Load every configured file; the engine is disposed by the runner"""
    engine = create_engine(database_url, echo=False)
    runner = LoadRunner(engine, default_jobs(extract_dir))
    return await runner.run()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Load the extracted CSV dump into the database")
    parser.add_argument("--database-url", default=None, help=f"Defaults to {settings.DATABASE_URL}")
    parser.add_argument("--extract-dir", default=None, help=f"Defaults to {settings.EXTRACT_DIR}")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    summary = asyncio.run(run_load(args.database_url, args.extract_dir))
    if not summary.succeeded:
        logger.error("Load run failed, see errors above")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
