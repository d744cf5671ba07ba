"""catalog schema

Revision ID: 0001_catalog_schema
Revises:
Create Date: 2026-09-14 10:12:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_catalog_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "category",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("parent_key", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["category.id"], name="fk_category_parent_id_category"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_category"),
        sa.UniqueConstraint("name", "parent_key", name="uq_category_name_parent_key"),
    )
    op.create_table(
        "product",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sku", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("short_description", sa.Text(), nullable=False),
        sa.Column("regular_price", sa.String(length=32), nullable=True),
        sa.Column("sale_price", sa.String(length=32), nullable=True),
        sa.Column("cost_price", sa.String(length=32), nullable=False),
        sa.Column("manage_stock", sa.Boolean(), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False),
        sa.Column("weight", sa.String(), nullable=True),
        sa.Column("length", sa.String(), nullable=True),
        sa.Column("width", sa.String(), nullable=True),
        sa.Column("height", sa.String(), nullable=True),
        sa.Column("category_ids", sa.Text(), nullable=False),
        sa.Column("attributes", sa.Text(), nullable=False),
        sa.Column("featured_asset_id", sa.Uuid(), nullable=True),
        sa.Column("gallery_asset_ids", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_product"),
        sa.UniqueConstraint("sku", name="uq_product_sku"),
    )
    op.create_table(
        "media_asset",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("path", sa.String(), nullable=False),
        sa.Column("mime_type", sa.String(), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("source_url", sa.String(), nullable=False),
        sa.Column("renditions", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["product_id"], ["product.id"], name="fk_media_asset_product_id_product"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_media_asset"),
    )
    with op.batch_alter_table("media_asset") as batch_op:
        batch_op.create_index("ix_media_asset_product_id", ["product_id"], unique=False)
        batch_op.create_index("ix_media_asset_source_url", ["source_url"], unique=False)


def downgrade() -> None:
    with op.batch_alter_table("media_asset") as batch_op:
        batch_op.drop_index("ix_media_asset_source_url")
        batch_op.drop_index("ix_media_asset_product_id")
    op.drop_table("media_asset")
    op.drop_table("product")
    op.drop_table("category")
