"""
CSV row source: lazily turns a delimited text file into ordered records
"""

import asyncio
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

import pandas as pd

from core.exceptions import ParseError
from schemas.tables import TableSchema
import logging

logger = logging.getLogger(__name__)

Record = Dict[str, str]


class CSVRowSource:
    """
    Read records from a CSV file.

    - First line names the columns; blank lines are skipped
    - Values are kept as the raw strings found in the file
    - A malformed line aborts the whole file with ParseError
    - Optional TableSchema validates header and values at this boundary
    """

    def __init__(
        self,
        file_path: str,
        table_schema: Optional[TableSchema] = None,
        chunk_size: int = 5000,
        encoding: str = "utf-8-sig"
    ):
        self.file_path = Path(file_path)
        self.table_schema = table_schema
        self.chunk_size = chunk_size
        self.encoding = encoding

    def iter_records(self) -> Iterator[Record]:
        """
        Yield records in file order.

        Every call reopens the file, so a fresh iterator starts from the
        first record again.

        Raises:
            ParseError: Missing/unreadable file, bad header, wrong field
                count, or a value rejected by the table schema
        """
        if not self.file_path.is_file():
            raise ParseError("CSV file not found", context={"file_path": str(self.file_path)})

        logger.info(f"Reading CSV from {self.file_path}")

        # header=None keeps pandas from guessing an index column when a data
        # line is longer than the header; the header is handled below.
        # The python engine reports missing trailing fields as None, where the
        # C engine would fill them with "" and hide a short line.
        try:
            reader = pd.read_csv(
                self.file_path,
                engine="python",
                header=None,
                dtype=object,
                keep_default_na=False,
                skip_blank_lines=True,
                chunksize=self.chunk_size,
                encoding=self.encoding,
            )
        except pd.errors.EmptyDataError as e:
            raise ParseError(
                "CSV file has no header line",
                context={"file_path": str(self.file_path)},
                original_exception=e
            )
        except (UnicodeDecodeError, pd.errors.ParserError, OSError) as e:
            raise self._read_error(e, 0)

        header: Optional[List[str]] = None
        record_number = 0

        with reader:
            while True:
                try:
                    chunk = next(reader)
                except StopIteration:
                    break
                except (UnicodeDecodeError, pd.errors.ParserError, OSError) as e:
                    raise self._read_error(e, record_number)

                for row in chunk.itertuples(index=False, name=None):
                    if header is None:
                        header = self._parse_header(row)
                        continue

                    record_number += 1
                    yield self._build_record(header, row, record_number)

        if header is None:
            raise ParseError("CSV file has no header line", context={"file_path": str(self.file_path)})

        logger.info(f"Read {record_number} records from {self.file_path.name}")

    def read_all(self) -> List[Record]:
        """Materialize every record of the file"""
        return list(self.iter_records())

    async def fetch_batch(self) -> List[Record]:
        """
        Read the whole file into memory without blocking the event loop.

        The batch is complete before the caller starts inserting it.
        """
        return await asyncio.to_thread(self.read_all)

    def _parse_header(self, row: Sequence) -> List[str]:
        header = ["" if pd.isna(name) else str(name).strip() for name in row]

        if any(name == "" for name in header) or len(set(header)) != len(header):
            raise ParseError(
                "CSV header has empty or duplicate column names",
                context={"file_path": str(self.file_path), "header": header}
            )

        if self.table_schema is not None:
            self.table_schema.validate_header(header, str(self.file_path))

        return header

    def _build_record(self, header: List[str], row: Sequence, record_number: int) -> Record:
        # Missing fields come back as None; an empty field stays ""
        if any(pd.isna(value) for value in row):
            raise ParseError(
                "Wrong number of fields",
                context={
                    "file_path": str(self.file_path),
                    "record_number": record_number,
                    "expected_fields": len(header)
                }
            )

        record = dict(zip(header, row))

        if self.table_schema is not None:
            self.table_schema.validate_record(record, record_number, str(self.file_path))

        return record

    def _read_error(self, exc: Exception, record_number: int) -> ParseError:
        if isinstance(exc, UnicodeDecodeError):
            message = "CSV file is not valid text in the expected encoding"
        elif isinstance(exc, pd.errors.ParserError):
            message = "Malformed CSV line"
        else:
            message = "CSV file could not be read"

        return ParseError(
            message,
            context={
                "file_path": str(self.file_path),
                "records_read": record_number,
                "encoding": self.encoding
            },
            original_exception=exc
        )
