from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import ListingStatus
from listing_sync.infrastructure.database.models import ProductListingModel

_IMMUTABLE_COLUMNS = frozenset({"id", "product_id", "platform_id", "created_at"})


def _to_domain(model: ProductListingModel) -> ProductListing:
    return ProductListing(
        id=model.id,
        product_id=model.product_id,
        platform_id=model.platform_id,
        template_id=model.template_id,
        external_listing_id=model.external_listing_id,
        listing_url=model.listing_url,
        status=ListingStatus(model.status),
        last_synced_at=model.last_synced_at,
        last_error=model.last_error,
        content_snapshot=model.content_snapshot,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_row(listing: ProductListing) -> dict[str, Any]:
    return {
        "id": listing.id,
        "product_id": listing.product_id,
        "platform_id": listing.platform_id,
        "template_id": listing.template_id,
        "external_listing_id": listing.external_listing_id,
        "listing_url": listing.listing_url,
        "status": listing.status.value,
        "last_synced_at": listing.last_synced_at,
        "last_error": listing.last_error,
        "content_snapshot": listing.content_snapshot,
        "created_at": listing.created_at,
        "updated_at": listing.updated_at,
    }


class SqlAlchemyListingRepository(ListingRepository):
    """
    SQLAlchemy implementation for listing persistence.

    Each call runs in its own short transaction so that concurrent
    per-platform work never shares a session. ``save`` is an upsert on the
    (product_id, platform_id) unique constraint.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, listing: ProductListing) -> ProductListing:
        row = _to_row(listing)
        stmt = pg_insert(ProductListingModel).values(**row)
        stmt = stmt.on_conflict_do_update(
            constraint="uq_product_listings_product_platform",
            set_={k: stmt.excluded[k] for k in row if k not in _IMMUTABLE_COLUMNS},
        ).returning(ProductListingModel)

        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                stmt, execution_options={"populate_existing": True}
            )
            return _to_domain(result.scalar_one())

    async def delete(self, listing_id: UUID) -> bool:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(ProductListingModel).where(ProductListingModel.id == listing_id)
            )
            return result.rowcount > 0

    async def get_by_id(self, listing_id: UUID) -> ProductListing | None:
        async with self._session_factory() as session:
            model = await session.get(ProductListingModel, listing_id)
            return _to_domain(model) if model is not None else None

    async def get_by_product_and_platform(
        self, product_id: str, platform_id: str
    ) -> ProductListing | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProductListingModel).where(
                    ProductListingModel.product_id == product_id,
                    ProductListingModel.platform_id == platform_id,
                )
            )
            model = result.scalar_one_or_none()
            return _to_domain(model) if model is not None else None

    async def get_by_product_id(self, product_id: str) -> list[ProductListing]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProductListingModel)
                .where(ProductListingModel.product_id == product_id)
                .order_by(ProductListingModel.created_at.asc())
            )
            return [_to_domain(m) for m in result.scalars().all()]

    async def get_all(
        self,
        *,
        status: ListingStatus | None = None,
        platform_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ProductListing], int]:
        query = select(ProductListingModel)
        count_query = select(func.count()).select_from(ProductListingModel)

        if status is not None:
            query = query.where(ProductListingModel.status == status.value)
            count_query = count_query.where(ProductListingModel.status == status.value)
        if platform_id is not None:
            query = query.where(ProductListingModel.platform_id == platform_id)
            count_query = count_query.where(ProductListingModel.platform_id == platform_id)

        query = (
            query.order_by(ProductListingModel.created_at.asc(), ProductListingModel.id.asc())
            .limit(limit)
            .offset(offset)
        )

        async with self._session_factory() as session:
            result = await session.execute(query)
            models = result.scalars().all()

            count_result = await session.execute(count_query)
            total = count_result.scalar_one()

        return [_to_domain(m) for m in models], total
