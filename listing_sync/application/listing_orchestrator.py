"""
Entry point for the listing workflows.

Wires the use cases around one shared set of collaborators and one per-pair
lock, so that every workflow started through the same orchestrator is
serialised on a given (product, platform) pair.
"""
from listing_sync.application.interfaces.catalog_reader import PlatformCatalog, ProductCatalog
from listing_sync.application.interfaces.credential_store import CredentialStore
from listing_sync.application.interfaces.event_publisher import EventPublisher
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.platform_adapter import AdapterFactory
from listing_sync.application.interfaces.status_history_repository import StatusHistoryRepository
from listing_sync.application.services.concurrency import KeyedLock
from listing_sync.application.services.listing_recorder import ListingRecorder
from listing_sync.application.services.platform_services import PlatformServices
from listing_sync.application.use_cases.create_listings import CreateListings, CreateListingsInput
from listing_sync.application.use_cases.delete_listings import DeleteListings, DeleteListingsInput
from listing_sync.application.use_cases.reset_listing_error import (
    ResetListingError,
    ResetListingErrorInput,
    ResetListingErrorOutput,
)
from listing_sync.application.use_cases.results import BulkListingResult
from listing_sync.application.use_cases.sync_listing_statuses import (
    SyncListingStatuses,
    SyncListingStatusesInput,
)
from listing_sync.application.use_cases.update_listings import UpdateListings, UpdateListingsInput
from listing_sync.application.use_cases.verify_platform_credentials import (
    VerifyPlatformCredentials,
    VerifyPlatformCredentialsInput,
    VerifyPlatformCredentialsOutput,
)
from listing_sync.domain.entities.listing_template import CustomListingData


class ListingOrchestrator:
    def __init__(
        self,
        *,
        listing_repo: ListingRepository,
        history_repo: StatusHistoryRepository,
        products: ProductCatalog,
        platforms: PlatformCatalog,
        credentials: CredentialStore,
        adapter_factory: AdapterFactory,
        event_publisher: EventPublisher,
        pair_lock: KeyedLock | None = None,
        public_base_url: str = "",
        sync_batch_size: int = 500,
    ) -> None:
        pair_lock = pair_lock or KeyedLock()
        platform_services = PlatformServices(platforms, credentials, adapter_factory)
        recorder = ListingRecorder(listing_repo, history_repo, event_publisher)

        self._create = CreateListings(
            listing_repo, products, platform_services, recorder, pair_lock, public_base_url
        )
        self._update = UpdateListings(
            listing_repo, products, platform_services, recorder, pair_lock, public_base_url
        )
        self._delete = DeleteListings(listing_repo, platform_services, recorder, pair_lock)
        self._sync = SyncListingStatuses(
            listing_repo, platform_services, recorder, pair_lock, batch_size=sync_batch_size
        )
        self._reset = ResetListingError(listing_repo, recorder, pair_lock)
        self._verify = VerifyPlatformCredentials(platform_services)

    async def create_listings(
        self,
        product_id: str,
        platform_ids: list[str],
        actor_id: str,
        template_ids: dict[str, str] | None = None,
        custom_data: dict[str, CustomListingData] | None = None,
    ) -> BulkListingResult:
        return await self._create.execute(
            CreateListingsInput(
                product_id=product_id,
                platform_ids=platform_ids,
                actor_id=actor_id,
                template_ids=template_ids or {},
                custom_data=custom_data or {},
            )
        )

    async def update_listings(
        self,
        product_id: str,
        actor_id: str,
        platform_ids: list[str] | None = None,
        custom_data: dict[str, CustomListingData] | None = None,
    ) -> BulkListingResult:
        return await self._update.execute(
            UpdateListingsInput(
                product_id=product_id,
                actor_id=actor_id,
                platform_ids=platform_ids,
                custom_data=custom_data or {},
            )
        )

    async def delete_listings(
        self, product_id: str, actor_id: str, platform_ids: list[str] | None = None
    ) -> BulkListingResult:
        return await self._delete.execute(
            DeleteListingsInput(product_id=product_id, actor_id=actor_id, platform_ids=platform_ids)
        )

    async def sync_listing_statuses(
        self, actor_id: str, product_id: str | None = None
    ) -> BulkListingResult:
        return await self._sync.execute(
            SyncListingStatusesInput(actor_id=actor_id, product_id=product_id)
        )

    async def reset_listing_error(
        self, product_id: str, platform_id: str, actor_id: str
    ) -> ResetListingErrorOutput:
        return await self._reset.execute(
            ResetListingErrorInput(product_id=product_id, platform_id=platform_id, actor_id=actor_id)
        )

    async def verify_credentials(
        self, platform_id: str, actor_id: str
    ) -> VerifyPlatformCredentialsOutput:
        return await self._verify.execute(
            VerifyPlatformCredentialsInput(platform_id=platform_id, actor_id=actor_id)
        )
