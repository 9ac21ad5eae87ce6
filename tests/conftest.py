"""In-memory collaborators for exercising the listing workflows without I/O."""
import copy
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

import pytest

from listing_sync.application.interfaces.catalog_reader import PlatformCatalog, ProductCatalog
from listing_sync.application.interfaces.credential_store import CredentialStore
from listing_sync.application.interfaces.event_publisher import EventPublisher
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.platform_adapter import (
    DeleteOutcome,
    PlatformAdapter,
    PublishedListing,
    RemoteListingStatus,
)
from listing_sync.application.interfaces.status_history_repository import (
    StatusHistoryRecord,
    StatusHistoryRepository,
)
from listing_sync.application.listing_orchestrator import ListingOrchestrator
from listing_sync.domain.entities.listing_template import ListingTemplate
from listing_sync.domain.entities.platform import Platform, PlatformCredentials
from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.entities.product_snapshot import ProductSnapshot
from listing_sync.domain.enums.listing_status import ListingStatus, RemoteStatus
from listing_sync.domain.events.domain_events import DomainEvent
from listing_sync.domain.templating.template_engine import ListingContent

ACTOR = "user-1"


class InMemoryListingRepository(ListingRepository):
    """Keeps rows in a dict and enforces one row per (product_id, platform_id)."""

    def __init__(self) -> None:
        self.rows: dict[UUID, ProductListing] = {}

    async def save(self, listing: ProductListing) -> ProductListing:
        for row in self.rows.values():
            same_pair = (row.product_id, row.platform_id) == (listing.product_id, listing.platform_id)
            if same_pair and row.id != listing.id:
                raise AssertionError(
                    f"duplicate listing for {listing.product_id}/{listing.platform_id}"
                )
        stored = copy.deepcopy(listing)
        stored.collect_events()
        self.rows[stored.id] = stored
        return copy.deepcopy(stored)

    async def delete(self, listing_id: UUID) -> bool:
        return self.rows.pop(listing_id, None) is not None

    async def get_by_id(self, listing_id: UUID) -> ProductListing | None:
        row = self.rows.get(listing_id)
        return copy.deepcopy(row) if row is not None else None

    async def get_by_product_and_platform(
        self, product_id: str, platform_id: str
    ) -> ProductListing | None:
        for row in self.rows.values():
            if row.product_id == product_id and row.platform_id == platform_id:
                return copy.deepcopy(row)
        return None

    async def get_by_product_id(self, product_id: str) -> list[ProductListing]:
        return [copy.deepcopy(r) for r in self.rows.values() if r.product_id == product_id]

    async def get_all(
        self,
        *,
        status: ListingStatus | None = None,
        platform_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ProductListing], int]:
        rows = [
            r
            for r in self.rows.values()
            if (status is None or r.status == status)
            and (platform_id is None or r.platform_id == platform_id)
        ]
        return [copy.deepcopy(r) for r in rows[offset : offset + limit]], len(rows)

    def row_for(self, product_id: str, platform_id: str) -> ProductListing | None:
        for row in self.rows.values():
            if row.product_id == product_id and row.platform_id == platform_id:
                return row
        return None


class InMemoryStatusHistoryRepository(StatusHistoryRepository):
    def __init__(self) -> None:
        self.records: list[StatusHistoryRecord] = []

    async def save(
        self,
        *,
        listing_id: UUID,
        from_status: ListingStatus | None,
        to_status: ListingStatus,
        triggered_by: str,
        metadata: dict | None = None,  # type: ignore[type-arg]
    ) -> StatusHistoryRecord:
        record = StatusHistoryRecord(
            id=uuid4(),
            listing_id=listing_id,
            from_status=from_status,
            to_status=to_status,
            transitioned_at=datetime.now(timezone.utc),
            triggered_by=triggered_by,
            metadata=metadata or {},
        )
        self.records.append(record)
        return record

    async def get_history_for_listing(self, listing_id: UUID) -> list[StatusHistoryRecord]:
        return [r for r in self.records if r.listing_id == listing_id]


class RecordingEventPublisher(EventPublisher):
    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)


class FakeProductCatalog(ProductCatalog):
    def __init__(self) -> None:
        self.products: dict[str, ProductSnapshot] = {}

    async def get_product(self, product_id: str) -> ProductSnapshot | None:
        return self.products.get(product_id)


class FakePlatformCatalog(PlatformCatalog):
    def __init__(self) -> None:
        self.platforms: dict[str, Platform] = {}
        self.templates: list[ListingTemplate] = []

    async def get_platform(self, platform_id: str) -> Platform | None:
        return self.platforms.get(platform_id)

    async def get_template(self, template_id: str) -> ListingTemplate | None:
        return next((t for t in self.templates if t.id == template_id), None)

    async def list_templates(self, platform_id: str) -> list[ListingTemplate]:
        return [t for t in self.templates if t.platform_id == platform_id]


class FakeCredentialStore(CredentialStore):
    def __init__(self) -> None:
        self.stored: dict[tuple[str, str], PlatformCredentials] = {}

    async def get(self, user_id: str, platform_id: str) -> PlatformCredentials | None:
        return self.stored.get((user_id, platform_id))


class FakeAdapter(PlatformAdapter):
    """Scriptable adapter: set the ``*_error`` attributes to make a call fail."""

    def __init__(self, platform: Platform, credentials: dict[str, Any] | None = None) -> None:
        super().__init__(platform, credentials)
        self.create_error: Exception | None = None
        self.update_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.status_error: Exception | None = None
        self.auth_result = True
        self.delete_outcome = DeleteOutcome.DELETED
        self.remote_status = RemoteListingStatus(status=RemoteStatus.ACTIVE)
        self.create_warnings: tuple[str, ...] = ()
        self.created: list[ListingContent] = []
        self.updated: list[tuple[str, ListingContent]] = []
        self.deleted: list[str] = []
        self.status_checks: list[str] = []

    def has_required_credentials(self) -> bool:
        return True

    async def authenticate(self) -> bool:
        return self.auth_result

    async def create_listing(self, content: ListingContent) -> PublishedListing:
        if self.create_error is not None:
            raise self.create_error
        self.created.append(content)
        n = len(self.created)
        return PublishedListing(
            external_listing_id=f"{self.platform.id}-ext-{n}",
            listing_url=f"https://{self.platform.id}.example/items/{n}",
            warnings=self.create_warnings,
        )

    async def update_listing(self, external_listing_id: str, content: ListingContent) -> PublishedListing:
        if self.update_error is not None:
            raise self.update_error
        self.updated.append((external_listing_id, content))
        return PublishedListing(external_listing_id=external_listing_id)

    async def delete_listing(self, external_listing_id: str) -> DeleteOutcome:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(external_listing_id)
        return self.delete_outcome

    async def get_listing_status(self, external_listing_id: str) -> RemoteListingStatus:
        if self.status_error is not None:
            raise self.status_error
        self.status_checks.append(external_listing_id)
        return self.remote_status


class ListingHarness:
    """Wires an orchestrator around the in-memory fakes."""

    def __init__(self) -> None:
        self.listings = InMemoryListingRepository()
        self.history = InMemoryStatusHistoryRepository()
        self.publisher = RecordingEventPublisher()
        self.products = FakeProductCatalog()
        self.platforms = FakePlatformCatalog()
        self.credentials = FakeCredentialStore()
        self.adapters: dict[str, FakeAdapter] = {}
        self.factory_calls: list[tuple[str, dict[str, Any] | None]] = []
        self.orchestrator = ListingOrchestrator(
            listing_repo=self.listings,
            history_repo=self.history,
            products=self.products,
            platforms=self.platforms,
            credentials=self.credentials,
            adapter_factory=self._adapter_factory,
            event_publisher=self.publisher,
            public_base_url="https://shop.example",
        )

    def _adapter_factory(
        self, platform: Platform, credentials: dict[str, Any] | None
    ) -> PlatformAdapter:
        self.factory_calls.append((platform.id, credentials))
        adapter = self.adapters[platform.id]
        adapter.credentials = credentials or {}
        return adapter

    def add_product(self, product_id: str = "p1", **overrides: Any) -> ProductSnapshot:
        fields: dict[str, Any] = {
            "id": product_id,
            "name": "Mono Panel 400W",
            "sku": "SP-400",
            "price": Decimal("100.00"),
            "description": "<p>High efficiency panel</p>",
            "category_id": "cat-1",
            "category_name": "Solar Panels",
            "images": ("https://cdn.example/panel.jpg",),
        }
        fields.update(overrides)
        product = ProductSnapshot(**fields)
        self.products.products[product_id] = product
        return product

    def add_platform(
        self,
        platform_id: str,
        *,
        credentials: dict[str, Any] | None = None,
        with_credentials: bool = True,
        with_template: bool = True,
        **overrides: Any,
    ) -> FakeAdapter:
        platform = Platform(
            id=platform_id,
            name=overrides.pop("name", platform_id),
            display_name=overrides.pop("display_name", platform_id.title()),
            **overrides,
        )
        self.platforms.platforms[platform_id] = platform
        if with_template:
            self.add_template(platform_id, f"{platform_id}-default", is_default=True)
        if with_credentials:
            self.credentials.stored[(ACTOR, platform_id)] = PlatformCredentials(
                id=f"cred-{platform_id}",
                user_id=ACTOR,
                platform_id=platform_id,
                credentials=credentials or {"token": f"{platform_id}-token"},
            )
        adapter = FakeAdapter(platform)
        self.adapters[platform_id] = adapter
        return adapter

    def add_template(self, platform_id: str, template_id: str, **overrides: Any) -> ListingTemplate:
        template = ListingTemplate(
            id=template_id,
            platform_id=platform_id,
            name=overrides.pop("name", template_id),
            **overrides,
        )
        self.platforms.templates.append(template)
        return template

    def seed_listing(
        self,
        product_id: str,
        platform_id: str,
        status: ListingStatus,
        *,
        external_listing_id: str | None = "ext-1",
        last_error: str | None = None,
        template_id: str | None = None,
    ) -> ProductListing:
        listing = ProductListing(
            product_id=product_id,
            platform_id=platform_id,
            status=status,
            external_listing_id=external_listing_id,
            last_error=last_error,
            template_id=template_id,
        )
        self.listings.rows[listing.id] = listing
        return listing


@pytest.fixture()
def harness() -> ListingHarness:
    return ListingHarness()
