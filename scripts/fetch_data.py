"""
Script to download and unpack the CSV dump
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from core.config import settings
from core.exceptions import ArchiveError
from core.logging import setup_logging
from ingestion.archive import extract_archive, fetch_and_extract

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Download and extract the CSV dump")
    parser.add_argument("--url", default=settings.ARCHIVE_URL)
    parser.add_argument("--archive-path", default=settings.ARCHIVE_PATH)
    parser.add_argument("--extract-dir", default=settings.EXTRACT_DIR)
    parser.add_argument("--skip-download", action="store_true", help="Only extract an existing archive")
    args = parser.parse_args(argv)

    setup_logging()

    try:
        if args.skip_download:
            extract_archive(args.archive_path, args.extract_dir)
        else:
            asyncio.run(fetch_and_extract(args.url, args.archive_path, args.extract_dir))
    except ArchiveError as e:
        logger.error(f"Fetch failed: {e}", extra={"error_context": e.to_dict()})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
