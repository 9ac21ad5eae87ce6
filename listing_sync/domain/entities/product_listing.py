from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from listing_sync.domain.enums.listing_status import ListingStatus
from listing_sync.domain.events.domain_events import DomainEvent, ListingStatusChangedEvent
from listing_sync.domain.state_machine.listing_state_machine import ListingStateMachine

_state_machine = ListingStateMachine()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProductListing:
    """
    One product on one marketplace platform.

    At most one row exists per (product_id, platform_id). A pair without a row
    is implicitly NOT_LISTED. Status changes go through the state machine and
    emit domain events; callers collect and publish them.
    """

    # Identity
    id: UUID = field(default_factory=uuid4)
    product_id: str = ""
    platform_id: str = ""
    template_id: str | None = None

    # Platform-side identity, set once the platform accepted the listing
    external_listing_id: str | None = None
    listing_url: str | None = None

    # State
    status: ListingStatus = ListingStatus.NOT_LISTED
    last_synced_at: datetime | None = None
    last_error: str | None = None

    # Payload actually sent to the platform
    content_snapshot: dict[str, Any] | None = None

    # Timestamps
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    _events: list[DomainEvent] = field(default_factory=list, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def not_listed(cls, *, product_id: str, platform_id: str) -> "ProductListing":
        """A fresh, unsaved row for a pair that has never been listed."""
        return cls(product_id=product_id, platform_id=platform_id)

    # -------------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------------

    def mark_pending(self, triggered_by: str) -> None:
        self._transition_to(ListingStatus.PENDING, triggered_by)

    def mark_active(
        self,
        *,
        triggered_by: str,
        external_listing_id: str | None = None,
        listing_url: str | None = None,
        content_snapshot: dict[str, Any] | None = None,
        template_id: str | None = None,
    ) -> None:
        """Record a platform-confirmed live listing. Omitted values keep what is stored."""
        if external_listing_id is not None:
            self.external_listing_id = external_listing_id
        if listing_url is not None:
            self.listing_url = listing_url
        if content_snapshot is not None:
            self.content_snapshot = content_snapshot
        if template_id is not None:
            self.template_id = template_id
        self.last_error = None
        self.last_synced_at = _utcnow()
        self._transition_to(ListingStatus.ACTIVE, triggered_by)

    def mark_error(
        self,
        message: str,
        *,
        triggered_by: str,
        content_snapshot: dict[str, Any] | None = None,
        template_id: str | None = None,
    ) -> None:
        """Record a failure. The external listing id is left as it was."""
        if content_snapshot is not None:
            self.content_snapshot = content_snapshot
        if template_id is not None:
            self.template_id = template_id
        self.last_error = message
        self._transition_to(ListingStatus.ERROR, triggered_by, error=message)

    def mark_removed(self, triggered_by: str) -> None:
        """The platform no longer has this listing. The external id is kept for reference."""
        self.last_synced_at = _utcnow()
        self._transition_to(ListingStatus.REMOVED, triggered_by)

    def _transition_to(
        self, new_status: ListingStatus, triggered_by: str, error: str | None = None
    ) -> None:
        _state_machine.validate_transition(self.status, new_status)

        old_status = self.status
        self.status = new_status
        self.updated_at = _utcnow()
        if new_status == old_status:
            # Refreshed, not changed: no history row and no event.
            return

        self._events.append(
            ListingStatusChangedEvent(
                listing_id=self.id,
                product_id=self.product_id,
                platform_id=self.platform_id,
                from_status=old_status,
                to_status=new_status,
                triggered_by=triggered_by,
                external_listing_id=self.external_listing_id,
                error=error,
            )
        )

    # -------------------------------------------------------------------------
    # Event collection
    # -------------------------------------------------------------------------

    def collect_events(self) -> list[DomainEvent]:
        """Return pending events and clear the internal buffer."""
        events = list(self._events)
        self._events.clear()
        return events
