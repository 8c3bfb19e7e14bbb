"""
SQLAlchemy ORM models for the destination tables.

Models:
    base: Base declarative class
    customer: ``customers`` table
    organization: ``organizations`` table

The loader itself never creates or alters schema. These models are used by
``scripts/init_db.py`` and the alembic migrations to provision the tables,
and by ``schemas.tables.TableSchema.from_table`` to validate CSV input.

Usage:
    from models.customer import Customer
    from schemas.tables import TableSchema

    schema = TableSchema.from_table(Customer.__table__)
"""

__all__ = [
    "Base",
    "Customer",
    "Organization",
]
