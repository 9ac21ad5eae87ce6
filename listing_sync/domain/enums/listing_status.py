from enum import Enum


class ListingStatus(str, Enum):
    """Local status of a product on one marketplace platform."""

    NOT_LISTED = "not_listed"
    PENDING = "pending"
    ACTIVE = "active"
    ERROR = "error"
    REMOVED = "removed"

    @property
    def is_live(self) -> bool:
        """Statuses that block a fresh create for the same product/platform."""
        return self in (ListingStatus.ACTIVE, ListingStatus.PENDING)


class RemoteStatus(str, Enum):
    """Platform-reported listing state, normalised by each adapter."""

    ACTIVE = "active"
    PENDING = "pending"
    REMOVED = "removed"
    ERROR = "error"
