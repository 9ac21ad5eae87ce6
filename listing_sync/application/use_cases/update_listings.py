from dataclasses import dataclass, field

import structlog

from listing_sync.application.exceptions import PlatformConfigurationError, ProductNotFoundError
from listing_sync.application.interfaces.catalog_reader import ProductCatalog
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.platform_adapter import PlatformRejectedError
from listing_sync.application.services.concurrency import KeyedLock, gather_in_order
from listing_sync.application.services.listing_recorder import ListingRecorder
from listing_sync.application.services.platform_services import PlatformServices
from listing_sync.application.use_cases.results import BulkListingResult, ListingOutcome, select_rows
from listing_sync.domain.entities.listing_template import CustomListingData, ListingTemplate
from listing_sync.domain.entities.platform import Platform
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.entities.product_snapshot import ProductSnapshot
from listing_sync.domain.templating.template_engine import PricingError, render_listing_content

logger = structlog.get_logger(__name__)

NOT_PUBLISHED = "listing has not been published to this platform"


@dataclass
class UpdateListingsInput:
    product_id: str
    actor_id: str
    platform_ids: list[str] | None = None
    custom_data: dict[str, CustomListingData] = field(default_factory=dict)


class UpdateListings:
    """
    Use case: re-render a product's content and push it to the platforms it
    is already listed on.

    Configuration or pricing problems leave the row as it is; only a platform
    rejection moves the listing to ``error``.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        products: ProductCatalog,
        platform_services: PlatformServices,
        recorder: ListingRecorder,
        pair_lock: KeyedLock,
        public_base_url: str = "",
    ) -> None:
        self._listing_repo = listing_repo
        self._products = products
        self._platforms = platform_services
        self._recorder = recorder
        self._pair_lock = pair_lock
        self._public_base_url = public_base_url

    async def execute(self, input_data: UpdateListingsInput) -> BulkListingResult:
        product = await self._products.get_product(input_data.product_id)
        if product is None:
            raise ProductNotFoundError(input_data.product_id)

        rows = select_rows(
            await self._listing_repo.get_by_product_id(product.id), input_data.platform_ids
        )
        outcomes = await gather_in_order(
            self._update_guarded(product, row, input_data) for row in rows
        )
        return BulkListingResult(product_id=product.id, results=outcomes)

    async def _update_guarded(
        self, product: ProductSnapshot, row: ProductListing, input_data: UpdateListingsInput
    ) -> ListingOutcome:
        try:
            async with self._pair_lock.hold((row.product_id, row.platform_id)):
                return await self._update_one(product, row, input_data)
        except Exception as exc:
            logger.exception(
                "listing_update_failed", product_id=row.product_id, platform_id=row.platform_id
            )
            return ListingOutcome.failed(
                product_id=row.product_id,
                platform_id=row.platform_id,
                status=row.status,
                error=str(exc) or type(exc).__name__,
            )

    async def _update_one(
        self, product: ProductSnapshot, row: ProductListing, input_data: UpdateListingsInput
    ) -> ListingOutcome:
        # Re-read under the pair lock so a concurrent delete is observed.
        listing = await self._listing_repo.get_by_id(row.id)
        if listing is None:
            return ListingOutcome.failed(
                product_id=row.product_id,
                platform_id=row.platform_id,
                status=row.status,
                error="listing was removed while the update was queued",
            )
        if not listing.external_listing_id:
            return ListingOutcome.failed(
                product_id=listing.product_id,
                platform_id=listing.platform_id,
                status=listing.status,
                error=NOT_PUBLISHED,
            )

        try:
            platform = await self._platforms.get_platform(listing.platform_id)
            template = await self._resolve_template(platform, listing.template_id)
            adapter = await self._platforms.build_adapter(platform, input_data.actor_id)
            content = render_listing_content(
                product,
                template,
                platform,
                input_data.custom_data.get(listing.platform_id),
                public_base_url=self._public_base_url,
            )
        except (PlatformConfigurationError, PricingError) as exc:
            return ListingOutcome.failed(
                product_id=listing.product_id,
                platform_id=listing.platform_id,
                status=listing.status,
                error=str(exc),
            )

        warnings: list[str] = []
        try:
            published = await adapter.update_listing(listing.external_listing_id, content)
        except PlatformRejectedError as exc:
            logger.warning(
                "listing_update_rejected",
                product_id=listing.product_id,
                platform_id=listing.platform_id,
                error=exc.message,
            )
            listing.mark_error(exc.message, triggered_by=input_data.actor_id)
        except Exception as exc:
            logger.exception(
                "adapter_update_crashed",
                product_id=listing.product_id,
                platform_id=listing.platform_id,
            )
            listing.mark_error(str(exc) or type(exc).__name__, triggered_by=input_data.actor_id)
        else:
            warnings = list(published.warnings)
            listing.mark_active(
                triggered_by=input_data.actor_id,
                listing_url=published.listing_url,
                content_snapshot=content.to_snapshot(),
                template_id=template.id,
            )

        stored = await self._recorder.save(listing)
        return ListingOutcome.from_listing(stored, platform_name=platform.display_name, warnings=warnings)

    async def _resolve_template(
        self, platform: Platform, template_id: str | None
    ) -> ListingTemplate:
        # The template a listing was created with may since have been retired.
        if template_id is not None:
            try:
                return await self._platforms.resolve_template(platform, template_id)
            except PlatformConfigurationError:
                logger.info("listing_template_fallback", platform_id=platform.id, template_id=template_id)
        return await self._platforms.resolve_template(platform)
