"""
SQLAlchemy ORM models.

These are purely infrastructure concerns; domain entities are mapped to/from
these models inside the repository implementations. Products live in the
separate catalog database and have no models here.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from listing_sync.domain.enums.listing_status import ListingStatus
from listing_sync.domain.enums.pricing import PriceAdjustmentType
from listing_sync.infrastructure.database.connection import Base

_listing_status_enum = SAEnum(
    ListingStatus,
    name="listing_status",
    values_callable=lambda obj: [e.value for e in obj],
)

_price_adjustment_enum = SAEnum(
    PriceAdjustmentType,
    name="price_adjustment_type",
    values_callable=lambda obj: [e.value for e in obj],
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ListingPlatformModel(Base):
    __tablename__ = "listing_platforms"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    supports_categories: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    supports_shipping_templates: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requires_auth: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    api_endpoint: Mapped[str | None] = mapped_column(String(512), nullable=True)
    sandbox_endpoint: Mapped[str | None] = mapped_column(String(512), nullable=True)
    max_title_length: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    max_description_length: Mapped[int] = mapped_column(Integer, nullable=False, default=5000)
    max_images: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class ListingTemplateModel(Base):
    __tablename__ = "listing_templates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    platform_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("listing_platforms.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    title_template: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_template: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_mapping: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)  # type: ignore[type-arg]
    price_adjustment_type: Mapped[str] = mapped_column(
        _price_adjustment_enum, nullable=False, default=PriceAdjustmentType.NONE.value
    )
    price_adjustment_value: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    shipping_template: Mapped[dict | None] = mapped_column(JSONB, nullable=True)  # type: ignore[type-arg]
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class PlatformCredentialsModel(Base):
    __tablename__ = "platform_credentials"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    platform_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("listing_platforms.id"), nullable=False
    )
    credentials: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)  # type: ignore[type-arg]
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (UniqueConstraint("user_id", "platform_id", name="uq_platform_credentials_user_platform"),)


class ProductListingModel(Base):
    __tablename__ = "product_listings"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    platform_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("listing_platforms.id"), nullable=False, index=True
    )
    template_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("listing_templates.id", ondelete="SET NULL"), nullable=True
    )

    external_listing_id: Mapped[str | None] = mapped_column(String(256), nullable=True)
    listing_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    status: Mapped[str] = mapped_column(_listing_status_enum, nullable=False, index=True)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)  # type: ignore[type-arg]

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    status_history: Mapped[list["ListingStatusHistoryModel"]] = relationship(
        "ListingStatusHistoryModel",
        back_populates="listing",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )

    __table_args__ = (
        UniqueConstraint("product_id", "platform_id", name="uq_product_listings_product_platform"),
    )


class ListingStatusHistoryModel(Base):
    __tablename__ = "listing_status_history"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    listing_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("product_listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status: Mapped[str | None] = mapped_column(_listing_status_enum, nullable=True)
    to_status: Mapped[str] = mapped_column(_listing_status_enum, nullable=False)
    transitioned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    triggered_by: Mapped[str] = mapped_column(String(256), nullable=False)
    metadata_: Mapped[dict] = mapped_column(  # type: ignore[type-arg]
        "metadata", JSONB, nullable=False, default=dict
    )

    listing: Mapped[ProductListingModel] = relationship(
        "ProductListingModel", back_populates="status_history"
    )
