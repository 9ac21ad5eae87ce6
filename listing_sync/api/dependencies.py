"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, keeping the route handlers thin.
"""
from fastapi import Depends, Header

from listing_sync.application.interfaces.event_publisher import EventPublisher
from listing_sync.application.interfaces.listing_repository import ListingRepository
from listing_sync.application.interfaces.status_history_repository import StatusHistoryRepository
from listing_sync.application.listing_orchestrator import ListingOrchestrator
from listing_sync.application.services.concurrency import KeyedLock
from listing_sync.config import settings
from listing_sync.infrastructure.database.connection import AsyncSessionLocal, ProductsSessionLocal
from listing_sync.infrastructure.database.repositories.credential_store import (
    SqlAlchemyCredentialStore,
)
from listing_sync.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
)
from listing_sync.infrastructure.database.repositories.platform_catalog import (
    SqlAlchemyPlatformCatalog,
)
from listing_sync.infrastructure.database.repositories.product_catalog import SqlProductCatalog
from listing_sync.infrastructure.database.repositories.status_history_repository import (
    SqlAlchemyStatusHistoryRepository,
)
from listing_sync.infrastructure.messaging.noop_publisher import NoOpEventPublisher
from listing_sync.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher
from listing_sync.infrastructure.platforms.factory import create_platform_service

# One lock table per process, shared by every request.
pair_lock = KeyedLock()


# ---- Low-level dependencies ------------------------------------------------

def get_actor_id(x_actor_id: str = Header(min_length=1)) -> str:
    return x_actor_id


def get_listing_repo() -> ListingRepository:
    return SqlAlchemyListingRepository(AsyncSessionLocal)


def get_history_repo() -> StatusHistoryRepository:
    return SqlAlchemyStatusHistoryRepository(AsyncSessionLocal)


def get_event_publisher() -> EventPublisher:
    if settings.events_enabled:
        return RabbitMQPublisher()
    return NoOpEventPublisher()


# ---- Orchestrator ------------------------------------------------------------

def get_orchestrator(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    history_repo: StatusHistoryRepository = Depends(get_history_repo),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> ListingOrchestrator:
    return ListingOrchestrator(
        listing_repo=listing_repo,
        history_repo=history_repo,
        products=SqlProductCatalog(ProductsSessionLocal),
        platforms=SqlAlchemyPlatformCatalog(AsyncSessionLocal),
        credentials=SqlAlchemyCredentialStore(AsyncSessionLocal),
        adapter_factory=create_platform_service,
        event_publisher=event_publisher,
        pair_lock=pair_lock,
        public_base_url=settings.public_base_url,
        sync_batch_size=settings.sync_batch_size,
    )
