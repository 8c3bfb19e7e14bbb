"""create organizations table

Revision ID: 20240920_0002
Revises: 20240920_0001
Create Date: 2024-09-20 00:25:09
"""

from alembic import op
import sqlalchemy as sa

revision = "20240920_0002"
down_revision = "20240920_0001"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "organizations",
        sa.Column("Index", sa.Integer()),
        sa.Column("Organization Id", sa.String(255), primary_key=True),
        sa.Column("Name", sa.String(255)),
        sa.Column("Website", sa.String(255)),
        sa.Column("Country", sa.String(255)),
        sa.Column("Description", sa.String(255)),
        sa.Column("Founded", sa.Integer()),
        sa.Column("Industry", sa.String(255)),
        sa.Column("Number of employees", sa.Integer()),
    )


def downgrade():
    op.drop_table("organizations")
