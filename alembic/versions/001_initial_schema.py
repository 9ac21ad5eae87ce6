"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LISTING_STATUSES = ("not_listed", "pending", "active", "error", "removed")
PRICE_ADJUSTMENT_TYPES = ("none", "fixed", "percentage")


def upgrade() -> None:
    bind = op.get_bind()
    ENUM(*LISTING_STATUSES, name="listing_status").create(bind, checkfirst=True)
    ENUM(*PRICE_ADJUSTMENT_TYPES, name="price_adjustment_type").create(bind, checkfirst=True)

    listing_status = ENUM(*LISTING_STATUSES, name="listing_status", create_type=False)
    price_adjustment_type = ENUM(
        *PRICE_ADJUSTMENT_TYPES, name="price_adjustment_type", create_type=False
    )

    # Marketplace reference data
    op.create_table(
        "listing_platforms",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(64), nullable=False, unique=True),
        sa.Column("display_name", sa.String(128), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("supports_categories", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "supports_shipping_templates", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("requires_auth", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("api_endpoint", sa.String(512), nullable=True),
        sa.Column("sandbox_endpoint", sa.String(512), nullable=True),
        sa.Column("max_title_length", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("max_description_length", sa.Integer(), nullable=False, server_default="5000"),
        sa.Column("max_images", sa.Integer(), nullable=False, server_default="10"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_table(
        "listing_templates",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "platform_id",
            sa.String(64),
            sa.ForeignKey("listing_platforms.id"),
            nullable=False,
        ),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("title_template", sa.Text(), nullable=True),
        sa.Column("description_template", sa.Text(), nullable=True),
        sa.Column("category_mapping", JSONB, nullable=False, server_default=sa.text("'{}'")),
        sa.Column(
            "price_adjustment_type",
            price_adjustment_type,
            nullable=False,
            server_default="none",
        ),
        sa.Column("price_adjustment_value", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("shipping_template", JSONB, nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_listing_templates_platform_id", "listing_templates", ["platform_id"])

    op.create_table(
        "platform_credentials",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column(
            "platform_id",
            sa.String(64),
            sa.ForeignKey("listing_platforms.id"),
            nullable=False,
        ),
        sa.Column("credentials", JSONB, nullable=False, server_default=sa.text("'{}'")),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("user_id", "platform_id", name="uq_platform_credentials_user_platform"),
    )

    # One row per product per platform
    op.create_table(
        "product_listings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("product_id", sa.String(64), nullable=False),
        sa.Column(
            "platform_id",
            sa.String(64),
            sa.ForeignKey("listing_platforms.id"),
            nullable=False,
        ),
        sa.Column(
            "template_id",
            sa.String(64),
            sa.ForeignKey("listing_templates.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("external_listing_id", sa.String(256), nullable=True),
        sa.Column("listing_url", sa.String(2048), nullable=True),
        sa.Column("status", listing_status, nullable=False),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("content_snapshot", JSONB, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("product_id", "platform_id", name="uq_product_listings_product_platform"),
    )
    op.create_index("ix_product_listings_product_id", "product_listings", ["product_id"])
    op.create_index("ix_product_listings_platform_id", "product_listings", ["platform_id"])
    op.create_index("ix_product_listings_status", "product_listings", ["status"])

    # Status history table for audit trail
    op.create_table(
        "listing_status_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "listing_id",
            UUID(as_uuid=True),
            sa.ForeignKey("product_listings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_status", listing_status, nullable=True),
        sa.Column("to_status", listing_status, nullable=False),
        sa.Column(
            "transitioned_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("triggered_by", sa.String(256), nullable=False),
        sa.Column("metadata", JSONB, nullable=False, server_default=sa.text("'{}'")),
    )
    op.create_index(
        "ix_listing_status_history_listing_id", "listing_status_history", ["listing_id"]
    )


def downgrade() -> None:
    op.drop_table("listing_status_history")
    op.drop_table("product_listings")
    op.drop_table("platform_credentials")
    op.drop_table("listing_templates")
    op.drop_table("listing_platforms")
    sa.Enum(name="price_adjustment_type").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="listing_status").drop(op.get_bind(), checkfirst=True)
