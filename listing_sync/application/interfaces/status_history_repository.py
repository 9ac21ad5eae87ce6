from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from listing_sync.domain.enums.listing_status import ListingStatus


@dataclass
class StatusHistoryRecord:
    id: UUID
    listing_id: UUID
    from_status: ListingStatus | None
    to_status: ListingStatus
    transitioned_at: datetime
    triggered_by: str
    metadata: dict  # type: ignore[type-arg]


class StatusHistoryRepository(ABC):
    """Port for the audit trail of listing status changes."""

    @abstractmethod
    async def save(
        self,
        *,
        listing_id: UUID,
        from_status: ListingStatus | None,
        to_status: ListingStatus,
        triggered_by: str,
        metadata: dict | None = None,  # type: ignore[type-arg]
    ) -> StatusHistoryRecord:
        ...

    @abstractmethod
    async def get_history_for_listing(self, listing_id: UUID) -> list[StatusHistoryRecord]:
        ...
