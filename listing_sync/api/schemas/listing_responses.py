from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from listing_sync.domain.enums.listing_status import ListingStatus


class ListingOutcomeResponse(BaseModel):
    product_id: str
    platform_id: str
    platform_name: str | None = None
    status: ListingStatus
    success: bool
    external_listing_id: str | None = None
    listing_url: str | None = None
    error: str | None = None
    warnings: list[str] = []


class BulkListingResponse(BaseModel):
    product_id: str | None
    results: list[ListingOutcomeResponse]
    succeeded: int
    failed: int


class ListingResponse(BaseModel):
    id: UUID
    product_id: str
    platform_id: str
    template_id: str | None = None
    external_listing_id: str | None = None
    listing_url: str | None = None
    status: ListingStatus
    last_synced_at: datetime | None = None
    last_error: str | None = None
    content_snapshot: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class PaginatedListingsResponse(BaseModel):
    listings: list[ListingResponse]
    total: int
    limit: int
    offset: int


class StatusHistoryEntryResponse(BaseModel):
    id: UUID
    from_status: ListingStatus | None
    to_status: ListingStatus
    transitioned_at: datetime
    triggered_by: str
    metadata: dict  # type: ignore[type-arg]


class ListingHistoryResponse(BaseModel):
    listing_id: UUID
    history: list[StatusHistoryEntryResponse]


class ClearErrorResponse(BaseModel):
    product_id: str
    platform_id: str
    cleared_error: str | None = None


class CredentialCheckResponse(BaseModel):
    platform_id: str
    platform_name: str
    authenticated: bool
    message: str
