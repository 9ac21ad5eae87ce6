from dataclasses import dataclass, field

import structlog

from listing_sync.application.exceptions import (
    InvalidListingRequestError,
    PlatformConfigurationError,
    ProductNotFoundError,
)
from listing_sync.application.interfaces.catalog_reader import ProductCatalog
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.platform_adapter import PlatformRejectedError
from listing_sync.application.services.concurrency import KeyedLock, gather_in_order
from listing_sync.application.services.listing_recorder import ListingRecorder
from listing_sync.application.services.platform_services import PlatformServices
from listing_sync.application.use_cases.results import BulkListingResult, ListingOutcome
from listing_sync.domain.entities.listing_template import CustomListingData
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.entities.product_snapshot import ProductSnapshot
from listing_sync.domain.templating.template_engine import PricingError, render_listing_content

logger = structlog.get_logger(__name__)

LISTING_EXISTS = "listing already exists for this platform"


@dataclass
class CreateListingsInput:
    product_id: str
    platform_ids: list[str]
    actor_id: str
    template_ids: dict[str, str] = field(default_factory=dict)
    custom_data: dict[str, CustomListingData] = field(default_factory=dict)


class CreateListings:
    """
    Use case: publish one product to several platforms.

    Each platform is an independent unit run concurrently with the others.
    A unit that fails is recorded as an ``error`` row and outcome; it never
    affects its siblings. Only a missing product or an empty platform list
    aborts the call.
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

    async def execute(self, input_data: CreateListingsInput) -> BulkListingResult:
        if not input_data.platform_ids:
            raise InvalidListingRequestError("At least one platform id is required.")

        product = await self._products.get_product(input_data.product_id)
        if product is None:
            raise ProductNotFoundError(input_data.product_id)

        outcomes = await gather_in_order(
            self._create_guarded(product, platform_id, input_data)
            for platform_id in input_data.platform_ids
        )

        logger.info(
            "listings_create_finished",
            product_id=product.id,
            requested=len(outcomes),
            succeeded=sum(1 for o in outcomes if o.success),
            actor_id=input_data.actor_id,
        )
        return BulkListingResult(product_id=product.id, results=outcomes)

    async def _create_guarded(
        self, product: ProductSnapshot, platform_id: str, input_data: CreateListingsInput
    ) -> ListingOutcome:
        try:
            async with self._pair_lock.hold((product.id, platform_id)):
                return await self._create_one(product, platform_id, input_data)
        except Exception as exc:
            logger.exception("listing_create_failed", product_id=product.id, platform_id=platform_id)
            return ListingOutcome.failed(
                product_id=product.id, platform_id=platform_id, error=str(exc) or type(exc).__name__
            )

    async def _create_one(
        self, product: ProductSnapshot, platform_id: str, input_data: CreateListingsInput
    ) -> ListingOutcome:
        actor = input_data.actor_id

        try:
            platform = await self._platforms.get_platform(platform_id)
        except PlatformConfigurationError as exc:
            return ListingOutcome.failed(product_id=product.id, platform_id=platform_id, error=str(exc))

        existing = await self._listing_repo.get_by_product_and_platform(product.id, platform_id)
        if existing is not None and existing.status.is_live:
            return ListingOutcome.failed(
                product_id=product.id,
                platform_id=platform_id,
                status=existing.status,
                platform_name=platform.display_name,
                error=LISTING_EXISTS,
            )

        listing = existing or ProductListing.not_listed(product_id=product.id, platform_id=platform_id)

        try:
            template = await self._platforms.resolve_template(
                platform, input_data.template_ids.get(platform_id)
            )
            adapter = await self._platforms.build_adapter(platform, actor)
            content = render_listing_content(
                product,
                template,
                platform,
                input_data.custom_data.get(platform_id),
                public_base_url=self._public_base_url,
            )
        except (PlatformConfigurationError, PricingError) as exc:
            logger.warning(
                "listing_not_attempted",
                product_id=product.id,
                platform_id=platform_id,
                reason=str(exc),
            )
            listing.mark_error(str(exc), triggered_by=actor)
            stored = await self._recorder.save(listing)
            return ListingOutcome.from_listing(stored, platform_name=platform.display_name)

        warnings: list[str] = []
        try:
            published = await adapter.create_listing(content)
        except PlatformRejectedError as exc:
            logger.warning(
                "listing_rejected",
                product_id=product.id,
                platform_id=platform_id,
                status_code=exc.status_code,
                error=exc.message,
            )
            listing.mark_error(
                exc.message,
                triggered_by=actor,
                content_snapshot=content.to_snapshot(),
                template_id=template.id,
            )
        except Exception as exc:
            logger.exception("adapter_create_crashed", product_id=product.id, platform_id=platform_id)
            listing.mark_error(
                str(exc) or type(exc).__name__,
                triggered_by=actor,
                content_snapshot=content.to_snapshot(),
                template_id=template.id,
            )
        else:
            warnings = list(published.warnings)
            listing.mark_active(
                triggered_by=actor,
                external_listing_id=published.external_listing_id,
                listing_url=published.listing_url,
                content_snapshot=content.to_snapshot(),
                template_id=template.id,
            )

        stored = await self._recorder.save(listing)
        return ListingOutcome.from_listing(stored, platform_name=platform.display_name, warnings=warnings)
