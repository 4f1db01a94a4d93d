"""create product analytics

Revision ID: 3b7e91c5d2a8
Revises: 8d3f2a61c0b4
Create Date: 2026-10-17 14:40:05.118342

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3b7e91c5d2a8'
down_revision: Union[str, Sequence[str], None] = '8d3f2a61c0b4'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "product_analytics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_product_analytics_product_id", "product_analytics", ["product_id"], unique=True
    )


def downgrade():
    op.drop_index("ix_product_analytics_product_id", table_name="product_analytics")
    op.drop_table("product_analytics")
