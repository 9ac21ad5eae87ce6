"""
Turns one catalog product into platform-ready listing content.

Rendering is deterministic: the same product, template, platform limits and
overrides always produce the same ListingContent.
"""
import html
import re
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any
from urllib.parse import urlparse

from listing_sync.domain.entities.listing_template import CustomListingData, ListingTemplate
from listing_sync.domain.entities.platform import Platform
from listing_sync.domain.entities.product_snapshot import ProductSnapshot
from listing_sync.domain.enums.pricing import BundlePricingType, PriceAdjustmentType

DEFAULT_TITLE_TEMPLATE = "{{product_name}}"
DEFAULT_DESCRIPTION_TEMPLATE = "{{product_description}}"

_TOKEN_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")
_TAG_RE = re.compile(r"<[^>]*>")
_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")
_HUNDRED = Decimal("100")


class PricingError(Exception):
    """Raised when a product cannot be priced for a listing."""


@dataclass(frozen=True)
class ListingContent:
    """Platform-neutral listing payload handed to an adapter."""

    title: str
    description: str
    price: Decimal
    category: str | None = None
    shipping: dict[str, Any] | None = None
    images: tuple[str, ...] = field(default_factory=tuple)
    condition: str = "new"
    quantity: int = 1
    product_id: str | None = None
    product_url: str | None = None

    def to_snapshot(self) -> dict[str, Any]:
        snapshot = asdict(self)
        snapshot["price"] = str(self.price)
        snapshot["images"] = list(self.images)
        return snapshot


# -----------------------------------------------------------------------------
# Pricing
# -----------------------------------------------------------------------------


def compute_bundle_price(product: ProductSnapshot) -> Decimal:
    """
    Price of a bundle product.

    ``calculated`` bundles cost the sum of their components (unit price x
    quantity) less ``bundle_discount_percentage``; any other bundle uses its
    own price field.
    """
    if product.bundle_pricing_type != BundlePricingType.CALCULATED:
        return product.price

    total_component_price = sum(
        (component.unit_price * component.quantity for component in product.components),
        Decimal("0"),
    )
    discount_amount = total_component_price * product.bundle_discount_percentage / _HUNDRED
    return total_component_price - discount_amount


def base_price(product: ProductSnapshot) -> Decimal:
    return compute_bundle_price(product) if product.is_bundle else product.price


def apply_price_adjustment(
    price: Decimal, adjustment_type: PriceAdjustmentType, adjustment_value: Decimal
) -> Decimal:
    if adjustment_type == PriceAdjustmentType.FIXED:
        return price + adjustment_value
    if adjustment_type == PriceAdjustmentType.PERCENTAGE:
        return price * (1 + adjustment_value / _HUNDRED)
    return price


def listing_price(product: ProductSnapshot, template: ListingTemplate) -> Decimal:
    """Base price with the template's adjustment applied. Never negative."""
    price = apply_price_adjustment(
        base_price(product), template.price_adjustment_type, template.price_adjustment_value
    )
    if price < 0:
        raise PricingError(
            f"Listing price for product {product.id} is negative ({price}) "
            f"after template '{template.name}' adjustment"
        )
    return price


# -----------------------------------------------------------------------------
# Text
# -----------------------------------------------------------------------------


def strip_html(text: str) -> str:
    return html.unescape(_TAG_RE.sub("", text)).replace("\xa0", " ").strip()


def substitute_tokens(template: str, tokens: dict[str, str]) -> str:
    """Replace ``{{token}}`` placeholders. Unknown tokens are left as written."""
    return _TOKEN_RE.sub(lambda m: tokens.get(m.group(1), m.group(0)), template)


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max(max_length - 3, 0)] + "..."


def _category_slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def resolve_category(product: ProductSnapshot, template: ListingTemplate) -> str | None:
    """Look the product's category up in the template mapping, by id first, then by slug."""
    mapping = template.category_mapping
    if product.category_id is not None and product.category_id in mapping:
        return mapping[product.category_id]
    if product.category_name:
        return mapping.get(_category_slug(product.category_name))
    return None


# -----------------------------------------------------------------------------
# Images
# -----------------------------------------------------------------------------


def _is_valid_image_url(url: str) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    if parsed.scheme:
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
    return url.startswith("/") and parsed.path.lower().endswith(_IMAGE_EXTENSIONS)


def _absolute_url(url: str, public_base_url: str) -> str:
    if urlparse(url).scheme:
        return url
    return f"{public_base_url.rstrip('/')}{url}"


def select_images(images: tuple[str, ...], max_images: int, public_base_url: str) -> tuple[str, ...]:
    """Keep usable http(s) image URLs, capped at ``max_images``.

    Relative paths are only usable when a public base URL is configured.
    """
    valid = [
        url
        for url in images
        if _is_valid_image_url(url) and (public_base_url or urlparse(url).scheme)
    ]
    return tuple(_absolute_url(url, public_base_url) for url in valid[:max_images])


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------


def render_listing_content(
    product: ProductSnapshot,
    template: ListingTemplate,
    platform: Platform,
    custom: CustomListingData | None = None,
    public_base_url: str = "",
) -> ListingContent:
    """
    Build the content for one product on one platform.

    Raises PricingError when the final price (including an override) is negative.
    """
    custom = custom or CustomListingData()
    price = listing_price(product, template)
    if custom.price is not None:
        if custom.price < 0:
            raise PricingError(f"Price override for product {product.id} is negative ({custom.price})")
        price = custom.price

    tokens = {
        "product_name": _first_set(custom.product_name, product.name),
        "product_sku": _first_set(custom.product_sku, product.sku),
        "product_description": _first_set(
            custom.product_description, strip_html(product.description or "")
        ),
        "product_category": _first_set(custom.product_category, product.category_name or ""),
        "product_price": f"{price:.2f}",
    }

    title = custom.title or substitute_tokens(
        template.title_template or DEFAULT_TITLE_TEMPLATE, tokens
    )
    description = custom.description or substitute_tokens(
        template.description_template or DEFAULT_DESCRIPTION_TEMPLATE, tokens
    )
    category = custom.category or resolve_category(product, template)

    product_url = (
        f"{public_base_url.rstrip('/')}/products/{product.id}" if public_base_url else None
    )

    return ListingContent(
        title=truncate(title, platform.max_title_length),
        description=truncate(description, platform.max_description_length),
        price=price,
        category=category,
        shipping=template.shipping_template,
        images=select_images(product.images, platform.max_images, public_base_url),
        product_id=product.id,
        product_url=product_url,
    )


def _first_set(override: str | None, default: str) -> str:
    return override if override is not None else default
