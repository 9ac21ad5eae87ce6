"""Facebook Marketplace adapter, backed by Graph API catalog products."""
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import httpx
import structlog

from listing_sync.application.interfaces.platform_adapter import (
    DeleteOutcome,
    PlatformRejectedError,
    PublishedListing,
    RemoteListingStatus,
)
from listing_sync.domain.enums.listing_status import RemoteStatus
from listing_sync.domain.templating.template_engine import ListingContent, strip_html
from listing_sync.infrastructure.platforms.base import HttpPlatformAdapter, response_json

logger = structlog.get_logger(__name__)

GRAPH_API_URL = "https://graph.facebook.com/v20.0"
MARKETPLACE_ITEM_URL = "https://www.facebook.com/marketplace/item/{id}"
MAX_IMAGES = 20

AUTH_ERROR_CODES = {"190", "102", "463"}
NOT_FOUND_ERROR_CODE = "100"
AUTH_ERROR_MESSAGE = (
    "Error validating access token: Session has expired. "
    "Please update your Facebook access token in Platform Settings."
)

_ACTIVE_AVAILABILITY = {"in stock", "available for order", "preorder"}
_REMOVED_AVAILABILITY = {"out of stock", "discontinued", "mark_as_sold"}


def _graph_error(response: httpx.Response) -> dict[str, Any]:
    error = response_json(response).get("error")
    return error if isinstance(error, dict) else {}


def _price_in_cents(price: Decimal) -> int:
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _is_public_url(url: str) -> bool:
    return bool(url) and "localhost" not in url and "127.0.0.1" not in url


class FacebookMarketplaceAdapter(HttpPlatformAdapter):
    @property
    def _base_url(self) -> str:
        return (self.platform.api_endpoint or GRAPH_API_URL).rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.credentials.get('accessToken', '')}"}

    def has_required_credentials(self) -> bool:
        return all(self.credentials.get(k) for k in ("accessToken", "pageId", "catalogId"))

    async def authenticate(self) -> bool:
        if not self.validate_credentials():
            return False
        response = await self._send("GET", f"{self._base_url}/me", headers=self._headers)
        if not response.is_success:
            logger.warning(
                "facebook_authentication_failed",
                status_code=response.status_code,
                error=_graph_error(response).get("message"),
            )
            return False
        return bool(response_json(response).get("id"))

    async def create_listing(self, content: ListingContent) -> PublishedListing:
        self.require_credentials()

        images = [url for url in content.images[:MAX_IMAGES] if _is_public_url(url)]
        if not images:
            raise PlatformRejectedError(
                self.name,
                "Facebook Marketplace requires publicly accessible image URLs. "
                "Set PUBLIC_BASE_URL to a public domain or add hosted product images.",
            )

        price = _price_in_cents(content.price)
        if price <= 0:
            raise PlatformRejectedError(self.name, "Invalid price value for Facebook listing")

        payload: dict[str, Any] = {
            "name": content.title,
            "description": strip_html(content.description) or content.title,
            "price": price,
            "currency": "USD",
            "condition": content.condition,
            "availability": "in stock",
            "retailer_id": f"ls_{content.product_id or 'item'}_{uuid.uuid4().hex[:8]}",
            "image_url": images[0],
        }
        if len(images) > 1:
            payload["additional_image_urls"] = images[1:]
        if content.category:
            payload["category"] = content.category
        if content.product_url:
            payload["url"] = content.product_url

        response = await self._send(
            "POST",
            f"{self._base_url}/{self.credentials['catalogId']}/products",
            json=payload,
            headers=self._headers,
        )
        if not response.is_success:
            raise self._rejected(response, "Failed to create Facebook listing")

        product_id = response_json(response).get("id")
        if not product_id:
            raise PlatformRejectedError(self.name, "Facebook did not return a product ID")

        logger.info("facebook_listing_created", external_listing_id=product_id)
        return PublishedListing(
            external_listing_id=str(product_id),
            listing_url=MARKETPLACE_ITEM_URL.format(id=product_id),
        )

    async def update_listing(self, external_listing_id: str, content: ListingContent) -> PublishedListing:
        self.require_credentials()

        payload: dict[str, Any] = {
            "name": content.title,
            "description": strip_html(content.description) or content.title,
            "price": _price_in_cents(content.price),
        }
        if content.category:
            payload["category"] = content.category

        warnings: tuple[str, ...] = ()
        images = [url for url in content.images[:MAX_IMAGES] if _is_public_url(url)]
        if images:
            payload["image_url"] = images[0]
            payload["additional_image_urls"] = images[1:]
        elif content.images:
            warnings = ("images were not updated: no publicly accessible image URLs",)

        response = await self._send(
            "POST",
            f"{self._base_url}/{external_listing_id}",
            json=payload,
            headers=self._headers,
        )
        if not response.is_success:
            raise self._rejected(response, "Failed to update Facebook listing")

        return PublishedListing(
            external_listing_id=external_listing_id,
            listing_url=MARKETPLACE_ITEM_URL.format(id=external_listing_id),
            warnings=warnings,
        )

    async def delete_listing(self, external_listing_id: str) -> DeleteOutcome:
        self.require_credentials()

        response = await self._send(
            "DELETE", f"{self._base_url}/{external_listing_id}", headers=self._headers
        )
        if self._is_not_found(response):
            logger.info("facebook_listing_already_gone", external_listing_id=external_listing_id)
            return DeleteOutcome.NOT_FOUND
        if not response.is_success:
            raise self._rejected(response, "Failed to delete Facebook listing")
        return DeleteOutcome.DELETED

    async def get_listing_status(self, external_listing_id: str) -> RemoteListingStatus:
        self.require_credentials()

        response = await self._send(
            "GET",
            f"{self._base_url}/{external_listing_id}",
            params={"fields": "availability,review_status"},
            headers=self._headers,
        )
        if self._is_not_found(response):
            return RemoteListingStatus(status=RemoteStatus.REMOVED)
        if not response.is_success:
            raise self._rejected(response, "Failed to read Facebook listing status")

        data = response_json(response)
        return self._map_status(
            data.get("availability"),
            data.get("review_status"),
            MARKETPLACE_ITEM_URL.format(id=external_listing_id),
        )

    @staticmethod
    def _map_status(
        availability: str | None, review_status: str | None, listing_url: str
    ) -> RemoteListingStatus:
        review = (review_status or "").upper()
        if review == "PENDING":
            return RemoteListingStatus(status=RemoteStatus.PENDING, listing_url=listing_url)
        if review == "REJECTED":
            return RemoteListingStatus(
                status=RemoteStatus.ERROR,
                listing_url=listing_url,
                detail="Facebook rejected the listing in review",
            )

        availability = (availability or "").lower()
        if availability in _ACTIVE_AVAILABILITY:
            return RemoteListingStatus(status=RemoteStatus.ACTIVE, listing_url=listing_url)
        if availability == "pending":
            return RemoteListingStatus(status=RemoteStatus.PENDING, listing_url=listing_url)
        if availability in _REMOVED_AVAILABILITY:
            return RemoteListingStatus(status=RemoteStatus.REMOVED, listing_url=listing_url)
        return RemoteListingStatus(
            status=RemoteStatus.ERROR,
            listing_url=listing_url,
            detail=f"unrecognised Facebook availability '{availability}'",
        )

    @staticmethod
    def _is_not_found(response: httpx.Response) -> bool:
        if response.status_code == 404:
            return True
        return not response.is_success and str(_graph_error(response).get("code")) == NOT_FOUND_ERROR_CODE

    def _error_message(self, response: httpx.Response) -> str | None:
        error = _graph_error(response)
        code = error.get("code")
        if response.status_code == 401 or str(code) in AUTH_ERROR_CODES:
            return AUTH_ERROR_MESSAGE
        return error.get("message") or error.get("error_user_msg")
