"""
Archive acquisition: download the dump and unpack it next to the loader.

These are preparatory steps run before the load; the loader only needs the
extracted CSV files to exist.
"""

import asyncio
import tarfile
from pathlib import Path
from typing import Optional

import httpx

from core.exceptions import ArchiveError
import logging

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


async def download_archive(
    url: str,
    dest_path: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 60.0
) -> Path:
    """
    Stream ``url`` to ``dest_path``.

    A partially written file is removed when the download fails.

    Raises:
        ArchiveError: On HTTP or network errors
    """
    dest = Path(dest_path)
    dest.parent.mkdir(parents=True, exist_ok=True)

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    logger.info(f"Downloading {url} to {dest}")
    try:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            with dest.open("wb") as fh:
                async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                    fh.write(chunk)
    except (httpx.HTTPError, OSError) as e:
        dest.unlink(missing_ok=True)
        raise ArchiveError(
            "Error downloading archive",
            context={"url": url, "dest_path": str(dest)},
            original_exception=e
        )
    finally:
        if owns_client:
            await client.aclose()

    logger.info(f"Download completed: {dest} ({dest.stat().st_size} bytes)")
    return dest


def extract_archive(archive_path: str, output_dir: str) -> Path:
    """
    Unpack a gzip-compressed tar archive into ``output_dir``.

    Members that would land outside ``output_dir`` (absolute paths, ``..``,
    links) are rejected.

    Raises:
        ArchiveError: Missing, corrupt or unsafe archive
    """
    archive = Path(archive_path)
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Extracting {archive} into {out_dir}")
    try:
        with tarfile.open(archive, mode="r:gz") as tar:
            tar.extractall(out_dir, filter="data")
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ArchiveError(
            "Error during extraction",
            context={"archive_path": str(archive), "output_dir": str(out_dir)},
            original_exception=e
        )

    logger.info("Extraction completed")
    return out_dir


async def fetch_and_extract(url: str, archive_path: str, output_dir: str) -> Path:
    """Download then extract; extraction runs in a worker thread"""
    await download_archive(url, archive_path)
    return await asyncio.to_thread(extract_archive, archive_path, output_dir)
