from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from listing_sync.domain.enums.listing_status import ListingStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ListingStatusChangedEvent(DomainEvent):
    """Published whenever a listing moves between statuses (create, update, sync)."""

    listing_id: UUID = field(default_factory=uuid4)
    product_id: str = ""
    platform_id: str = ""
    from_status: ListingStatus = ListingStatus.NOT_LISTED
    to_status: ListingStatus = ListingStatus.PENDING
    triggered_by: str = ""
    external_listing_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ListingWithdrawnEvent(DomainEvent):
    """Published when a listing was taken down from its platform and its row deleted."""

    listing_id: UUID = field(default_factory=uuid4)
    product_id: str = ""
    platform_id: str = ""
    external_listing_id: str | None = None
    triggered_by: str = ""


@dataclass(frozen=True)
class ListingResetEvent(DomainEvent):
    """Published when an administrator clears a failed listing back to not listed."""

    listing_id: UUID = field(default_factory=uuid4)
    product_id: str = ""
    platform_id: str = ""
    previous_status: ListingStatus = ListingStatus.ERROR
    previous_error: str | None = None
    triggered_by: str = ""
