from dataclasses import dataclass, field
from decimal import Decimal

from listing_sync.domain.enums.pricing import BundlePricingType


@dataclass(frozen=True)
class BundleComponent:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    sort_order: int = 0


@dataclass(frozen=True)
class ProductSnapshot:
    """Read-only view of a catalog product, as needed to build listing content."""

    id: str
    name: str
    sku: str
    price: Decimal
    description: str = ""
    category_id: str | None = None
    category_name: str | None = None
    images: tuple[str, ...] = ()
    is_bundle: bool = False
    bundle_pricing_type: BundlePricingType = BundlePricingType.CALCULATED
    bundle_discount_percentage: Decimal = Decimal("0")
    components: tuple[BundleComponent, ...] = field(default_factory=tuple)
