"""
Per-table record schemas used to validate CSV input before it is inserted
"""

from datetime import date
from typing import Dict, List, Optional, Sequence
import enum
import re

from pydantic import BaseModel, validator
from sqlalchemy import Date, DateTime, Integer, Table

from core.exceptions import ParseError

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


class ColumnType(str, enum.Enum):
    """Value types accepted at the CSV boundary"""
    STRING = "string"
    INTEGER = "integer"
    DATE = "date"


class ColumnSpec(BaseModel):
    """One destination column"""
    name: str
    type: ColumnType = ColumnType.STRING


class TableSchema(BaseModel):
    """
    Ordered column layout of one destination table.

    Validation never rewrites a value: records keep the raw strings read
    from the file, the schema only decides whether they are acceptable.
    """

    table_name: str
    columns: List[ColumnSpec]
    primary_key: Optional[str] = None

    @validator("primary_key")
    def primary_key_is_a_column(cls, v, values):
        """Primary key must name one of the columns"""
        columns = values.get("columns") or []
        if v is not None and v not in {c.name for c in columns}:
            raise ValueError(f"Primary key {v!r} is not a column")
        return v

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @classmethod
    def from_table(cls, table: Table) -> "TableSchema":
        """Build the schema from a SQLAlchemy table definition"""
        columns = []
        for col in table.columns:
            if isinstance(col.type, Integer):
                col_type = ColumnType.INTEGER
            elif isinstance(col.type, (Date, DateTime)):
                col_type = ColumnType.DATE
            else:
                col_type = ColumnType.STRING
            columns.append(ColumnSpec(name=col.name, type=col_type))

        pk_columns = list(table.primary_key.columns)
        primary_key = pk_columns[0].name if len(pk_columns) == 1 else None

        return cls(table_name=table.name, columns=columns, primary_key=primary_key)

    def validate_header(self, header: Sequence[str], file_path: str) -> None:
        """
        Check that the CSV header names exactly this table's columns.

        Column order in the file may differ from the table's.
        """
        expected = set(self.column_names)
        actual = list(header)

        duplicates = sorted({name for name in actual if actual.count(name) > 1})
        missing = sorted(expected - set(actual))
        unexpected = sorted(set(actual) - expected)

        if duplicates or missing or unexpected:
            raise ParseError(
                f"CSV header does not match table {self.table_name}",
                context={
                    "file_path": file_path,
                    "table_name": self.table_name,
                    "missing_columns": missing,
                    "unexpected_columns": unexpected,
                    "duplicate_columns": duplicates
                }
            )

    def validate_record(self, record: Dict[str, str], record_number: int, file_path: str) -> None:
        """Check every value of one record against its column type"""
        for spec in self.columns:
            value = record.get(spec.name, "")

            if value == "":
                if spec.name == self.primary_key:
                    raise self._value_error("Empty primary key value", spec, value, record_number, file_path)
                continue

            if spec.type == ColumnType.INTEGER and not _INTEGER_RE.match(value.strip()):
                raise self._value_error("Value is not an integer", spec, value, record_number, file_path)

            if spec.type == ColumnType.DATE:
                try:
                    date.fromisoformat(value.strip()[:10])
                except ValueError:
                    raise self._value_error("Value is not an ISO date", spec, value, record_number, file_path)

    def _value_error(
        self,
        message: str,
        spec: ColumnSpec,
        value: str,
        record_number: int,
        file_path: str
    ) -> ParseError:
        return ParseError(
            message,
            context={
                "file_path": file_path,
                "table_name": self.table_name,
                "record_number": record_number,
                "column_name": spec.name,
                "value": value[:100]
            }
        )
