"""Read-only access to products in the catalog database."""
from decimal import Decimal

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_sync.application.interfaces.catalog_reader import ProductCatalog
from listing_sync.domain.entities.product_snapshot import BundleComponent, ProductSnapshot
from listing_sync.domain.enums.pricing import BundlePricingType

logger = structlog.get_logger(__name__)


class SqlProductCatalog(ProductCatalog):
    """Loads a product with its category, images and bundle components."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_factory

    async def get_product(self, product_id: str) -> ProductSnapshot | None:
        async with self._session_maker() as session:
            product = await session.execute(
                text("""
                    SELECT p.id, p.name, p.sku, p.price, p.description, p.image_url,
                           p.category_id, c.name AS category_name,
                           p.is_bundle, p.bundle_pricing_type, p.bundle_discount_percentage
                    FROM products p
                    LEFT JOIN categories c ON c.id = p.category_id
                    WHERE p.id = :id
                """),
                {"id": product_id},
            )
            row = product.mappings().fetchone()
            if row is None:
                return None

            images = await session.execute(
                text("""
                    SELECT image_url
                    FROM product_images
                    WHERE product_id = :id
                    ORDER BY sort_order ASC, created_at ASC
                """),
                {"id": product_id},
            )
            image_urls = [r[0] for r in images.fetchall() if r[0]]
            # Older products only carry the single legacy column
            if not image_urls and row["image_url"]:
                image_urls = [row["image_url"]]

            components: list[BundleComponent] = []
            if row["is_bundle"]:
                items = await session.execute(
                    text("""
                        SELECT bi.component_product_id, cp.name, cp.price,
                               bi.quantity, bi.sort_order
                        FROM product_bundle_items bi
                        JOIN products cp ON cp.id = bi.component_product_id
                        WHERE bi.bundle_product_id = :id
                        ORDER BY bi.sort_order ASC, bi.created_at ASC
                    """),
                    {"id": product_id},
                )
                components = [
                    BundleComponent(
                        product_id=str(r[0]),
                        name=r[1],
                        unit_price=Decimal(str(r[2] or 0)),
                        quantity=int(r[3] or 1),
                        sort_order=int(r[4] or 0),
                    )
                    for r in items.fetchall()
                ]

        logger.debug(
            "product_loaded",
            product_id=product_id,
            images=len(image_urls),
            components=len(components),
        )
        return ProductSnapshot(
            id=str(row["id"]),
            name=row["name"],
            sku=row["sku"] or "",
            price=Decimal(str(row["price"] or 0)),
            description=row["description"] or "",
            category_id=str(row["category_id"]) if row["category_id"] is not None else None,
            category_name=row["category_name"],
            images=tuple(image_urls),
            is_bundle=bool(row["is_bundle"]),
            bundle_pricing_type=BundlePricingType(
                row["bundle_pricing_type"] or BundlePricingType.CALCULATED.value
            ),
            bundle_discount_percentage=Decimal(str(row["bundle_discount_percentage"] or 0)),
            components=tuple(components),
        )
