"""create customers table

Revision ID: 20240920_0001
Revises:
Create Date: 2024-09-20 00:24:42
"""

from alembic import op
import sqlalchemy as sa

revision = "20240920_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "customers",
        sa.Column("Index", sa.Integer()),
        sa.Column("Customer Id", sa.String(255), primary_key=True),
        sa.Column("First Name", sa.String(255)),
        sa.Column("Last Name", sa.String(255)),
        sa.Column("Company", sa.String(255)),
        sa.Column("City", sa.String(255)),
        sa.Column("Country", sa.String(255)),
        sa.Column("Phone 1", sa.String(255)),
        sa.Column("Phone 2", sa.String(255)),
        sa.Column("Email", sa.String(255)),
        sa.Column("Subscription Date", sa.Date()),
        sa.Column("Website", sa.String(255)),
    )


def downgrade():
    op.drop_table("customers")
