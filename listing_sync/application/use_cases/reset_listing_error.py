from dataclasses import dataclass

import structlog

from listing_sync.application.exceptions import InvalidListingRequestError, ListingNotFoundError
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.services.concurrency import KeyedLock
from listing_sync.application.services.listing_recorder import ListingRecorder
from listing_sync.domain.events.domain_events import ListingResetEvent

logger = structlog.get_logger(__name__)


@dataclass
class ResetListingErrorInput:
    product_id: str
    platform_id: str
    actor_id: str


@dataclass
class ResetListingErrorOutput:
    product_id: str
    platform_id: str
    cleared_error: str | None


class ResetListingError:
    """
    Use case: administrative reset of a failed listing.

    The row is deleted outright, so the pair is back to not listed and can be
    created again from scratch. Its status history goes with it. Live rows
    (active or pending) are refused since their platform listing still exists.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        recorder: ListingRecorder,
        pair_lock: KeyedLock,
    ) -> None:
        self._listing_repo = listing_repo
        self._recorder = recorder
        self._pair_lock = pair_lock

    async def execute(self, input_data: ResetListingErrorInput) -> ResetListingErrorOutput:
        async with self._pair_lock.hold((input_data.product_id, input_data.platform_id)):
            listing = await self._listing_repo.get_by_product_and_platform(
                input_data.product_id, input_data.platform_id
            )
            if listing is None:
                raise ListingNotFoundError(input_data.product_id, input_data.platform_id)
            if listing.status.is_live:
                raise InvalidListingRequestError(
                    f"Listing is {listing.status.value}; delete it instead of resetting it."
                )

            await self._recorder.remove(
                listing,
                ListingResetEvent(
                    listing_id=listing.id,
                    product_id=listing.product_id,
                    platform_id=listing.platform_id,
                    previous_status=listing.status,
                    previous_error=listing.last_error,
                    triggered_by=input_data.actor_id,
                ),
            )

        logger.info(
            "listing_error_reset",
            product_id=input_data.product_id,
            platform_id=input_data.platform_id,
            actor_id=input_data.actor_id,
        )
        return ResetListingErrorOutput(
            product_id=input_data.product_id,
            platform_id=input_data.platform_id,
            cleared_error=listing.last_error,
        )
