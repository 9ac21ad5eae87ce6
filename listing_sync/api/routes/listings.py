from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from listing_sync.api.dependencies import (
    get_actor_id,
    get_history_repo,
    get_listing_repo,
    get_orchestrator,
)
from listing_sync.api.schemas.listing_requests import (
    ClearErrorRequest,
    CreateListingsRequest,
    CredentialCheckRequest,
    CustomListingDataSchema,
    DeleteListingsRequest,
    SyncListingsRequest,
    UpdateListingsRequest,
)
from listing_sync.api.schemas.listing_responses import (
    BulkListingResponse,
    ClearErrorResponse,
    CredentialCheckResponse,
    ListingHistoryResponse,
    ListingOutcomeResponse,
    ListingResponse,
    PaginatedListingsResponse,
    StatusHistoryEntryResponse,
)
from listing_sync.application.exceptions import (
    CredentialsNotFoundError,
    InvalidListingRequestError,
    ListingNotFoundError,
    PlatformConfigurationError,
    PlatformNotFoundError,
    ProductNotFoundError,
)
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.status_history_repository import StatusHistoryRepository
from listing_sync.application.listing_orchestrator import ListingOrchestrator
from listing_sync.application.use_cases.results import BulkListingResult
from listing_sync.domain.entities.listing_template import CustomListingData
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import ListingStatus

router = APIRouter(prefix="/listings", tags=["listings"])

_NOT_FOUND_ERRORS = (ProductNotFoundError, ListingNotFoundError, PlatformNotFoundError)
_BAD_REQUEST_ERRORS = (
    InvalidListingRequestError,
    CredentialsNotFoundError,
    PlatformConfigurationError,
)
_PRECONDITION_ERRORS = _NOT_FOUND_ERRORS + _BAD_REQUEST_ERRORS


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, _NOT_FOUND_ERRORS):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _custom_data(raw: dict[str, CustomListingDataSchema]) -> dict[str, CustomListingData]:
    return {platform_id: data.to_domain() for platform_id, data in raw.items()}


def _bulk_to_response(result: BulkListingResult) -> BulkListingResponse:
    return BulkListingResponse(
        product_id=result.product_id,
        results=[
            ListingOutcomeResponse(
                product_id=r.product_id,
                platform_id=r.platform_id,
                platform_name=r.platform_name,
                status=r.status,
                success=r.success,
                external_listing_id=r.external_listing_id,
                listing_url=r.listing_url,
                error=r.error,
                warnings=r.warnings,
            )
            for r in result.results
        ],
        succeeded=len(result.succeeded),
        failed=len(result.failed),
    )


def _listing_to_response(listing: ProductListing) -> ListingResponse:
    return ListingResponse(
        id=listing.id,
        product_id=listing.product_id,
        platform_id=listing.platform_id,
        template_id=listing.template_id,
        external_listing_id=listing.external_listing_id,
        listing_url=listing.listing_url,
        status=listing.status,
        last_synced_at=listing.last_synced_at,
        last_error=listing.last_error,
        content_snapshot=listing.content_snapshot,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )


# ---- Workflows ---------------------------------------------------------------


@router.post("/create", response_model=BulkListingResponse)
async def create_listings(
    body: CreateListingsRequest,
    actor_id: str = Depends(get_actor_id),
    orchestrator: ListingOrchestrator = Depends(get_orchestrator),
) -> BulkListingResponse:
    """Publish a product to one or more platforms. Per-platform failures are reported, not raised."""
    try:
        result = await orchestrator.create_listings(
            product_id=body.product_id,
            platform_ids=body.platform_ids,
            actor_id=actor_id,
            template_ids=body.template_ids,
            custom_data=_custom_data(body.custom_data),
        )
    except _PRECONDITION_ERRORS as exc:
        raise _http_error(exc) from exc
    return _bulk_to_response(result)


@router.post("/update", response_model=BulkListingResponse)
async def update_listings(
    body: UpdateListingsRequest,
    actor_id: str = Depends(get_actor_id),
    orchestrator: ListingOrchestrator = Depends(get_orchestrator),
) -> BulkListingResponse:
    try:
        result = await orchestrator.update_listings(
            product_id=body.product_id,
            actor_id=actor_id,
            platform_ids=body.platform_ids,
            custom_data=_custom_data(body.custom_data),
        )
    except _PRECONDITION_ERRORS as exc:
        raise _http_error(exc) from exc
    return _bulk_to_response(result)


@router.post("/delete", response_model=BulkListingResponse)
async def delete_listings(
    body: DeleteListingsRequest,
    actor_id: str = Depends(get_actor_id),
    orchestrator: ListingOrchestrator = Depends(get_orchestrator),
) -> BulkListingResponse:
    result = await orchestrator.delete_listings(
        product_id=body.product_id, actor_id=actor_id, platform_ids=body.platform_ids
    )
    return _bulk_to_response(result)


@router.post("/sync", response_model=BulkListingResponse)
async def sync_listings(
    body: SyncListingsRequest,
    actor_id: str = Depends(get_actor_id),
    orchestrator: ListingOrchestrator = Depends(get_orchestrator),
) -> BulkListingResponse:
    """Refresh local status from the platforms, for one product or for every listing."""
    result = await orchestrator.sync_listing_statuses(actor_id=actor_id, product_id=body.product_id)
    return _bulk_to_response(result)


@router.post("/clear-error", response_model=ClearErrorResponse)
async def clear_listing_error(
    body: ClearErrorRequest,
    actor_id: str = Depends(get_actor_id),
    orchestrator: ListingOrchestrator = Depends(get_orchestrator),
) -> ClearErrorResponse:
    try:
        result = await orchestrator.reset_listing_error(
            product_id=body.product_id, platform_id=body.platform_id, actor_id=actor_id
        )
    except _PRECONDITION_ERRORS as exc:
        raise _http_error(exc) from exc
    return ClearErrorResponse(
        product_id=result.product_id,
        platform_id=result.platform_id,
        cleared_error=result.cleared_error,
    )


@router.post("/test-auth", response_model=CredentialCheckResponse)
async def test_platform_auth(
    body: CredentialCheckRequest,
    actor_id: str = Depends(get_actor_id),
    orchestrator: ListingOrchestrator = Depends(get_orchestrator),
) -> CredentialCheckResponse:
    try:
        result = await orchestrator.verify_credentials(platform_id=body.platform_id, actor_id=actor_id)
    except _PRECONDITION_ERRORS as exc:
        raise _http_error(exc) from exc
    return CredentialCheckResponse(
        platform_id=result.platform_id,
        platform_name=result.platform_name,
        authenticated=result.authenticated,
        message=result.message,
    )


# ---- Reads -------------------------------------------------------------------


@router.get("", response_model=PaginatedListingsResponse)
async def list_listings(
    status_filter: ListingStatus | None = Query(default=None, alias="status"),
    platform_id: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    repo: ListingRepository = Depends(get_listing_repo),
) -> PaginatedListingsResponse:
    """List listings with optional filtering."""
    listings, total = await repo.get_all(
        status=status_filter, platform_id=platform_id, limit=limit, offset=offset
    )
    return PaginatedListingsResponse(
        listings=[_listing_to_response(l) for l in listings],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: UUID,
    repo: ListingRepository = Depends(get_listing_repo),
) -> ListingResponse:
    listing = await repo.get_by_id(listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found.")
    return _listing_to_response(listing)


@router.get("/{listing_id}/history", response_model=ListingHistoryResponse)
async def get_listing_history(
    listing_id: UUID,
    listing_repo: ListingRepository = Depends(get_listing_repo),
    history_repo: StatusHistoryRepository = Depends(get_history_repo),
) -> ListingHistoryResponse:
    listing = await listing_repo.get_by_id(listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found.")

    history = await history_repo.get_history_for_listing(listing_id)
    return ListingHistoryResponse(
        listing_id=listing_id,
        history=[
            StatusHistoryEntryResponse(
                id=entry.id,
                from_status=entry.from_status,
                to_status=entry.to_status,
                transitioned_at=entry.transitioned_at,
                triggered_by=entry.triggered_by,
                metadata=entry.metadata,
            )
            for entry in history
        ],
    )
