from dataclasses import dataclass

import structlog

from listing_sync.application.exceptions import PlatformConfigurationError
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.platform_adapter import (
    PlatformRejectedError,
    RemoteListingStatus,
)
from listing_sync.application.services.concurrency import KeyedLock, gather_in_order
from listing_sync.application.services.listing_recorder import ListingRecorder
from listing_sync.application.services.platform_services import PlatformServices
from listing_sync.application.use_cases.results import BulkListingResult, ListingOutcome
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import RemoteStatus

logger = structlog.get_logger(__name__)

REMOTE_ERROR = "platform reports the listing in an error state"


@dataclass
class SyncListingStatusesInput:
    actor_id: str
    product_id: str | None = None


class SyncListingStatuses:
    """
    Use case: refresh local listing status from each platform.

    This is the only path by which an ``error`` listing recovers to ``active``
    on its own. A failed status call marks the row ``error`` and keeps it;
    a listing the platform no longer knows becomes ``removed``. Rows without
    an external listing id have nothing to ask the platform about and are
    skipped.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        platform_services: PlatformServices,
        recorder: ListingRecorder,
        pair_lock: KeyedLock,
        batch_size: int = 500,
        max_concurrency: int = 10,
    ) -> None:
        self._listing_repo = listing_repo
        self._platforms = platform_services
        self._recorder = recorder
        self._pair_lock = pair_lock
        self._batch_size = batch_size
        self._max_concurrency = max_concurrency

    async def execute(self, input_data: SyncListingStatusesInput) -> BulkListingResult:
        rows = [row for row in await self._rows_in_scope(input_data.product_id) if row.external_listing_id]

        outcomes = await gather_in_order(
            (self._sync_guarded(row, input_data.actor_id) for row in rows),
            limit=self._max_concurrency,
        )
        logger.info(
            "listing_sync_finished",
            product_id=input_data.product_id,
            checked=len(outcomes),
            errors=sum(1 for o in outcomes if not o.success),
            actor_id=input_data.actor_id,
        )
        return BulkListingResult(product_id=input_data.product_id, results=outcomes)

    async def _rows_in_scope(self, product_id: str | None) -> list[ProductListing]:
        if product_id is not None:
            return await self._listing_repo.get_by_product_id(product_id)

        rows: list[ProductListing] = []
        offset = 0
        while True:
            page, total = await self._listing_repo.get_all(limit=self._batch_size, offset=offset)
            rows.extend(page)
            offset += len(page)
            if not page or offset >= total:
                return rows

    async def _sync_guarded(self, row: ProductListing, actor_id: str) -> ListingOutcome:
        try:
            async with self._pair_lock.hold((row.product_id, row.platform_id)):
                return await self._sync_one(row, actor_id)
        except Exception as exc:
            logger.exception(
                "listing_sync_failed", product_id=row.product_id, platform_id=row.platform_id
            )
            return ListingOutcome.failed(
                product_id=row.product_id,
                platform_id=row.platform_id,
                status=row.status,
                error=str(exc) or type(exc).__name__,
            )

    async def _sync_one(self, row: ProductListing, actor_id: str) -> ListingOutcome:
        listing = await self._listing_repo.get_by_id(row.id)
        if listing is None or not listing.external_listing_id:
            return ListingOutcome.failed(
                product_id=row.product_id,
                platform_id=row.platform_id,
                status=row.status,
                error="listing changed while the sync was queued",
            )

        platform_name: str | None = None
        try:
            platform = await self._platforms.get_platform(listing.platform_id)
            platform_name = platform.display_name
            adapter = await self._platforms.build_adapter(platform, actor_id)
            remote = await adapter.get_listing_status(listing.external_listing_id)
        except PlatformConfigurationError as exc:
            listing.mark_error(str(exc), triggered_by=actor_id)
        except PlatformRejectedError as exc:
            logger.warning(
                "listing_status_unavailable",
                product_id=listing.product_id,
                platform_id=listing.platform_id,
                error=exc.message,
            )
            listing.mark_error(exc.message, triggered_by=actor_id)
        except Exception as exc:
            logger.exception(
                "adapter_status_crashed",
                product_id=listing.product_id,
                platform_id=listing.platform_id,
            )
            listing.mark_error(str(exc) or type(exc).__name__, triggered_by=actor_id)
        else:
            self._apply_remote_status(listing, remote, actor_id)

        stored = await self._recorder.save(listing)
        return ListingOutcome.from_listing(stored, platform_name=platform_name)

    @staticmethod
    def _apply_remote_status(
        listing: ProductListing, remote: RemoteListingStatus, actor_id: str
    ) -> None:
        if remote.status == RemoteStatus.ACTIVE:
            listing.mark_active(triggered_by=actor_id, listing_url=remote.listing_url)
        elif remote.status == RemoteStatus.REMOVED:
            listing.mark_removed(triggered_by=actor_id)
        elif remote.status == RemoteStatus.PENDING:
            listing.mark_pending(triggered_by=actor_id)
        else:
            listing.mark_error(remote.detail or REMOTE_ERROR, triggered_by=actor_id)
