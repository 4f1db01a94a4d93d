"""create discount rule

Revision ID: 8d3f2a61c0b4
Revises:
Create Date: 2026-10-17 10:12:31.402211

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8d3f2a61c0b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "discount_rule",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("product_ids", sa.String(), nullable=False, server_default="[]"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_discount_rule_type", "discount_rule", ["type"])
    op.create_index("ix_discount_rule_active", "discount_rule", ["active"])


def downgrade():
    op.drop_index("ix_discount_rule_active", table_name="discount_rule")
    op.drop_index("ix_discount_rule_type", table_name="discount_rule")
    op.drop_table("discount_rule")
