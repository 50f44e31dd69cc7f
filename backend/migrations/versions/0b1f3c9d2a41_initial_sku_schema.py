"""initial_sku_schema

Revision ID: 0b1f3c9d2a41
Revises:
Create Date: 2026-10-19 10:12:31.402117

"""

from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0b1f3c9d2a41"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create equipment_instances table (ULID as UUID)
    op.create_table(
        "equipment_instances",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("sku", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("category", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("brand", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("category_prefix", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("brand_prefix", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_equipment_instances_sku"), "equipment_instances", ["sku"], unique=True)
    op.create_index(
        op.f("ix_equipment_instances_category_prefix"), "equipment_instances", ["category_prefix"], unique=False
    )
    op.create_index(op.f("ix_equipment_instances_brand_prefix"), "equipment_instances", ["brand_prefix"], unique=False)

    # Create sku_sequences table
    op.create_table(
        "sku_sequences",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_prefix", sqlmodel.sql.sqltypes.AutoString(length=8), nullable=False),
        sa.Column("brand_prefix", sqlmodel.sql.sqltypes.AutoString(length=8), nullable=False),
        sa.Column("last_issued", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_used", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category_prefix", "brand_prefix", name="uq_sku_sequence_prefix_pair"),
    )

    # Create system_settings table
    op.create_table(
        "system_settings",
        sa.Column("key", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("value", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("system_settings")
    op.drop_table("sku_sequences")
    op.drop_index(op.f("ix_equipment_instances_brand_prefix"), table_name="equipment_instances")
    op.drop_index(op.f("ix_equipment_instances_category_prefix"), table_name="equipment_instances")
    op.drop_index(op.f("ix_equipment_instances_sku"), table_name="equipment_instances")
    op.drop_table("equipment_instances")
