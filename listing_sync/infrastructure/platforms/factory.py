from typing import Any

import httpx

from listing_sync.application.interfaces.platform_adapter import (
    PlatformAdapter,
    UnsupportedPlatformError,
)
from listing_sync.config import settings
from listing_sync.domain.entities.platform import Platform
from listing_sync.infrastructure.platforms.base import HttpPlatformAdapter
from listing_sync.infrastructure.platforms.craigslist import CraigslistAdapter
from listing_sync.infrastructure.platforms.ebay import EbayAdapter
from listing_sync.infrastructure.platforms.facebook import FacebookMarketplaceAdapter

ADAPTERS: dict[str, type[PlatformAdapter]] = {
    "facebook_marketplace": FacebookMarketplaceAdapter,
    "ebay": EbayAdapter,
    "craigslist": CraigslistAdapter,
}


def create_platform_service(
    platform: Platform,
    credentials: dict[str, Any] | None = None,
    *,
    timeout: float = settings.adapter_timeout_seconds,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PlatformAdapter:
    """Pick the adapter for ``platform.name``. Unknown names raise UnsupportedPlatformError."""
    adapter_cls = ADAPTERS.get(platform.name)
    if adapter_cls is None:
        raise UnsupportedPlatformError(platform.name)
    if issubclass(adapter_cls, HttpPlatformAdapter):
        return adapter_cls(platform, credentials, timeout=timeout, transport=transport)
    return adapter_cls(platform, credentials)
