from dataclasses import dataclass, field

from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import ListingStatus


@dataclass
class ListingOutcome:
    """What happened to one product on one platform during a bulk call."""

    product_id: str
    platform_id: str
    status: ListingStatus
    success: bool
    platform_name: str | None = None
    external_listing_id: str | None = None
    listing_url: str | None = None
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_listing(
        cls,
        listing: ProductListing,
        *,
        platform_name: str | None = None,
        warnings: list[str] | None = None,
    ) -> "ListingOutcome":
        return cls(
            product_id=listing.product_id,
            platform_id=listing.platform_id,
            status=listing.status,
            success=listing.status != ListingStatus.ERROR,
            platform_name=platform_name,
            external_listing_id=listing.external_listing_id,
            listing_url=listing.listing_url,
            error=listing.last_error,
            warnings=warnings or [],
        )

    @classmethod
    def failed(
        cls,
        *,
        product_id: str,
        platform_id: str,
        error: str,
        status: ListingStatus = ListingStatus.ERROR,
        platform_name: str | None = None,
    ) -> "ListingOutcome":
        return cls(
            product_id=product_id,
            platform_id=platform_id,
            status=status,
            success=False,
            platform_name=platform_name,
            error=error,
        )


@dataclass
class BulkListingResult:
    """Per-platform outcomes, in the order the platforms were requested."""

    product_id: str | None
    results: list[ListingOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ListingOutcome]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[ListingOutcome]:
        return [r for r in self.results if not r.success]


def select_rows(rows: list[ProductListing], platform_ids: list[str] | None) -> list[ProductListing]:
    """Rows for the requested platforms, in request order; all rows when none are given."""
    if platform_ids is None:
        return rows
    by_platform = {row.platform_id: row for row in rows}
    return [by_platform[pid] for pid in dict.fromkeys(platform_ids) if pid in by_platform]
