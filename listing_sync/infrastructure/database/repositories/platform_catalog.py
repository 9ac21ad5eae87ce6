from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_sync.application.interfaces.catalog_reader import PlatformCatalog
from listing_sync.domain.entities.listing_template import ListingTemplate
from listing_sync.domain.entities.platform import Platform
from listing_sync.domain.enums.pricing import PriceAdjustmentType
from listing_sync.infrastructure.database.models import ListingPlatformModel, ListingTemplateModel


def _platform_to_domain(model: ListingPlatformModel) -> Platform:
    return Platform(
        id=model.id,
        name=model.name,
        display_name=model.display_name,
        is_active=model.is_active,
        supports_categories=model.supports_categories,
        supports_shipping_templates=model.supports_shipping_templates,
        requires_auth=model.requires_auth,
        api_endpoint=model.api_endpoint,
        sandbox_endpoint=model.sandbox_endpoint,
        max_title_length=model.max_title_length,
        max_description_length=model.max_description_length,
        max_images=model.max_images,
    )


def _template_to_domain(model: ListingTemplateModel) -> ListingTemplate:
    return ListingTemplate(
        id=model.id,
        platform_id=model.platform_id,
        name=model.name,
        title_template=model.title_template,
        description_template=model.description_template,
        category_mapping={str(k): str(v) for k, v in (model.category_mapping or {}).items()},
        price_adjustment_type=PriceAdjustmentType(model.price_adjustment_type),
        price_adjustment_value=Decimal(model.price_adjustment_value or 0),
        shipping_template=model.shipping_template,
        is_default=model.is_default,
        is_active=model.is_active,
    )


class SqlAlchemyPlatformCatalog(PlatformCatalog):
    """Platforms and listing templates stored alongside the listings."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_platform(self, platform_id: str) -> Platform | None:
        async with self._session_factory() as session:
            model = await session.get(ListingPlatformModel, platform_id)
            return _platform_to_domain(model) if model is not None else None

    async def get_template(self, template_id: str) -> ListingTemplate | None:
        async with self._session_factory() as session:
            model = await session.get(ListingTemplateModel, template_id)
            return _template_to_domain(model) if model is not None else None

    async def list_templates(self, platform_id: str) -> list[ListingTemplate]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ListingTemplateModel)
                .where(ListingTemplateModel.platform_id == platform_id)
                .order_by(ListingTemplateModel.created_at.asc(), ListingTemplateModel.id.asc())
            )
            return [_template_to_domain(m) for m in result.scalars().all()]
