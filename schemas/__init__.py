"""
Pydantic schemas for validation and run reporting.

Schemas:
    tables: Per-table column layout (TableSchema) used to validate CSV input
    run: Load jobs, per-table results and the run summary

Usage:
    from schemas.tables import TableSchema
    from schemas.run import LoadJob, RunSummary

Example:
    # Validate customer rows against the provisioned table
    schema = TableSchema.from_table(Customer.__table__)
    job = LoadJob(
        file_path="tmp/extracted/dump/customers.csv",
        table_name="customers",
        table_schema=schema
    )

Validation:
    TableSchema checks header names, integer and ISO date values, and a
    non-empty primary key. It never coerces values: records reach the
    database as the strings read from the file.
"""

__all__ = [
    "ColumnType",
    "ColumnSpec",
    "TableSchema",
    "LoadJob",
    "RunState",
    "RunSummary",
    "TableLoadResult",
]
