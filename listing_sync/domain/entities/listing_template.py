from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from listing_sync.domain.enums.pricing import PriceAdjustmentType


@dataclass(frozen=True)
class ListingTemplate:
    """Platform-scoped rules for turning a product into listing content."""

    id: str
    platform_id: str
    name: str
    title_template: str | None = None
    description_template: str | None = None
    # local category id (or category slug) -> platform category
    category_mapping: dict[str, str] = field(default_factory=dict)
    price_adjustment_type: PriceAdjustmentType = PriceAdjustmentType.NONE
    price_adjustment_value: Decimal = Decimal("0")
    shipping_template: dict[str, Any] | None = None
    is_default: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class CustomListingData:
    """
    Caller-supplied overrides for one platform.

    The ``product_*`` fields replace the values substituted into the template
    tokens; the remaining fields replace the rendered content outright.
    """

    product_name: str | None = None
    product_sku: str | None = None
    product_description: str | None = None
    product_category: str | None = None
    title: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None
