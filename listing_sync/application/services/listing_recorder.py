import structlog

from listing_sync.application.interfaces.event_publisher import EventPublisher
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.status_history_repository import StatusHistoryRepository
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import ListingStatus
from listing_sync.domain.events.domain_events import DomainEvent, ListingStatusChangedEvent

logger = structlog.get_logger(__name__)


class ListingRecorder:
    """
    Commit point of every per-platform unit: persists the row, appends the
    status history and publishes the collected domain events.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        history_repo: StatusHistoryRepository,
        event_publisher: EventPublisher,
    ) -> None:
        self._listing_repo = listing_repo
        self._history_repo = history_repo
        self._event_publisher = event_publisher

    async def save(self, listing: ProductListing) -> ProductListing:
        events = listing.collect_events()
        stored = await self._listing_repo.save(listing)

        for event in events:
            if not isinstance(event, ListingStatusChangedEvent):
                continue
            metadata: dict = {}  # type: ignore[type-arg]
            if event.error:
                metadata["error"] = event.error
            if event.external_listing_id:
                metadata["external_listing_id"] = event.external_listing_id
            await self._history_repo.save(
                listing_id=stored.id,
                from_status=None if event.from_status == ListingStatus.NOT_LISTED else event.from_status,
                to_status=event.to_status,
                triggered_by=event.triggered_by,
                metadata=metadata,
            )

        await self._event_publisher.publish_many(events)
        logger.info(
            "listing_saved",
            listing_id=str(stored.id),
            product_id=stored.product_id,
            platform_id=stored.platform_id,
            status=stored.status.value,
        )
        return stored

    async def remove(self, listing: ProductListing, event: DomainEvent) -> None:
        """Delete the row, returning the pair to not listed."""
        await self._listing_repo.delete(listing.id)
        await self._event_publisher.publish(event)
        logger.info(
            "listing_row_deleted",
            listing_id=str(listing.id),
            product_id=listing.product_id,
            platform_id=listing.platform_id,
            event_type=type(event).__name__,
        )
