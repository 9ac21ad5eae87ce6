from dataclasses import dataclass

import structlog

from listing_sync.application.exceptions import PlatformConfigurationError
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.platform_adapter import DeleteOutcome, PlatformRejectedError
from listing_sync.application.services.concurrency import KeyedLock, gather_in_order
from listing_sync.application.services.listing_recorder import ListingRecorder
from listing_sync.application.services.platform_services import PlatformServices
from listing_sync.application.use_cases.results import BulkListingResult, ListingOutcome, select_rows
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import ListingStatus
from listing_sync.domain.events.domain_events import ListingWithdrawnEvent

logger = structlog.get_logger(__name__)


@dataclass
class DeleteListingsInput:
    product_id: str
    actor_id: str
    platform_ids: list[str] | None = None


class DeleteListings:
    """
    Use case: take a product down from its platforms and drop the rows.

    A row is deleted only once its platform confirmed the removal (or reported
    the listing already gone). On failure the row stays exactly as it was;
    nothing is retried automatically.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        platform_services: PlatformServices,
        recorder: ListingRecorder,
        pair_lock: KeyedLock,
    ) -> None:
        self._listing_repo = listing_repo
        self._platforms = platform_services
        self._recorder = recorder
        self._pair_lock = pair_lock

    async def execute(self, input_data: DeleteListingsInput) -> BulkListingResult:
        rows = select_rows(
            await self._listing_repo.get_by_product_id(input_data.product_id),
            input_data.platform_ids,
        )
        outcomes = await gather_in_order(
            self._delete_guarded(row, input_data.actor_id) for row in rows
        )
        logger.info(
            "listings_delete_finished",
            product_id=input_data.product_id,
            requested=len(outcomes),
            succeeded=sum(1 for o in outcomes if o.success),
            actor_id=input_data.actor_id,
        )
        return BulkListingResult(product_id=input_data.product_id, results=outcomes)

    async def _delete_guarded(self, row: ProductListing, actor_id: str) -> ListingOutcome:
        try:
            async with self._pair_lock.hold((row.product_id, row.platform_id)):
                return await self._delete_one(row, actor_id)
        except Exception as exc:
            logger.exception(
                "listing_delete_failed", product_id=row.product_id, platform_id=row.platform_id
            )
            return ListingOutcome.failed(
                product_id=row.product_id,
                platform_id=row.platform_id,
                status=row.status,
                error=str(exc) or type(exc).__name__,
            )

    async def _delete_one(self, row: ProductListing, actor_id: str) -> ListingOutcome:
        listing = await self._listing_repo.get_by_id(row.id)
        if listing is None:
            # Someone else already removed it.
            return ListingOutcome(
                product_id=row.product_id,
                platform_id=row.platform_id,
                status=ListingStatus.NOT_LISTED,
                success=True,
            )

        platform_name: str | None = None
        warnings: list[str] = []
        if listing.external_listing_id and listing.status != ListingStatus.NOT_LISTED:
            try:
                platform = await self._platforms.get_platform(listing.platform_id)
                platform_name = platform.display_name
                adapter = await self._platforms.build_adapter(platform, actor_id)
                result = await adapter.delete_listing(listing.external_listing_id)
            except PlatformConfigurationError as exc:
                return self._kept(listing, str(exc), platform_name)
            except PlatformRejectedError as exc:
                logger.warning(
                    "listing_delete_rejected",
                    product_id=listing.product_id,
                    platform_id=listing.platform_id,
                    error=exc.message,
                )
                return self._kept(listing, exc.message, platform_name)

            if result == DeleteOutcome.NOT_FOUND:
                warnings.append("listing was already gone from the platform")

        await self._recorder.remove(
            listing,
            ListingWithdrawnEvent(
                listing_id=listing.id,
                product_id=listing.product_id,
                platform_id=listing.platform_id,
                external_listing_id=listing.external_listing_id,
                triggered_by=actor_id,
            ),
        )
        return ListingOutcome(
            product_id=listing.product_id,
            platform_id=listing.platform_id,
            status=ListingStatus.NOT_LISTED,
            success=True,
            platform_name=platform_name,
            external_listing_id=listing.external_listing_id,
            warnings=warnings,
        )

    @staticmethod
    def _kept(listing: ProductListing, error: str, platform_name: str | None) -> ListingOutcome:
        return ListingOutcome.failed(
            product_id=listing.product_id,
            platform_id=listing.platform_id,
            status=listing.status,
            platform_name=platform_name,
            error=error,
        )
