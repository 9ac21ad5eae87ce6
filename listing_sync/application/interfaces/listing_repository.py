from abc import ABC, abstractmethod
from uuid import UUID

from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import ListingStatus


class ListingRepository(ABC):
    """Port for persisting and querying ProductListing rows.

    Implementations must keep at most one row per (product_id, platform_id):
    ``save`` of a listing whose pair already has a different row updates that
    row instead of inserting a second one.
    """

    @abstractmethod
    async def save(self, listing: ProductListing) -> ProductListing:
        """Insert or update; returns the listing as stored."""
        ...

    @abstractmethod
    async def delete(self, listing_id: UUID) -> bool:
        """Remove a row. Returns False if it did not exist."""
        ...

    @abstractmethod
    async def get_by_id(self, listing_id: UUID) -> ProductListing | None:
        ...

    @abstractmethod
    async def get_by_product_and_platform(
        self, product_id: str, platform_id: str
    ) -> ProductListing | None:
        ...

    @abstractmethod
    async def get_by_product_id(self, product_id: str) -> list[ProductListing]:
        ...

    @abstractmethod
    async def get_all(
        self,
        *,
        status: ListingStatus | None = None,
        platform_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ProductListing], int]:
        """Return (listings, total_count)."""
        ...
