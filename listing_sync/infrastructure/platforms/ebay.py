"""eBay adapter over the Sell Inventory REST API (inventory item + offer)."""
import uuid
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
from listing_sync.domain.templating.template_engine import ListingContent
from listing_sync.infrastructure.platforms.base import HttpPlatformAdapter, response_json

logger = structlog.get_logger(__name__)

PRODUCTION_URL = "https://api.ebay.com"
SANDBOX_URL = "https://api.sandbox.ebay.com"
ITEM_URL = "https://www.ebay.com/itm/{id}"
INVENTORY_PATH = "/sell/inventory/v1"
MARKETPLACE_ID = "EBAY_US"
MAX_IMAGES = 12

_POLICY_KEYS = ("fulfillmentPolicyId", "paymentPolicyId", "returnPolicyId")
_ENDED_LISTING_STATUSES = {"ENDED", "OUT_OF_STOCK", "INACTIVE"}


class EbayAdapter(HttpPlatformAdapter):
    """
    Publishes through inventory item + offer.

    The offer id is what gets stored as the external listing id; the public
    ``/itm/`` URL uses the listing id eBay hands back on publish.
    """

    @property
    def _base_url(self) -> str:
        if self.credentials.get("sandbox"):
            return (self.platform.sandbox_endpoint or SANDBOX_URL).rstrip("/")
        return (self.platform.api_endpoint or PRODUCTION_URL).rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credentials.get('userToken', '')}",
            "Content-Language": "en-US",
            "X-EBAY-C-MARKETPLACE-ID": MARKETPLACE_ID,
        }

    def _url(self, path: str) -> str:
        return f"{self._base_url}{INVENTORY_PATH}{path}"

    def has_required_credentials(self) -> bool:
        return bool(self.credentials.get("userToken")) and all(
            self.credentials.get(k) for k in _POLICY_KEYS
        )

    async def authenticate(self) -> bool:
        if not self.validate_credentials():
            return False
        response = await self._send(
            "GET", f"{self._base_url}/sell/account/v1/privilege", headers=self._headers
        )
        if not response.is_success:
            logger.warning("ebay_authentication_failed", status_code=response.status_code)
        return response.is_success

    async def create_listing(self, content: ListingContent) -> PublishedListing:
        self.require_credentials()
        if not content.category:
            raise PlatformRejectedError(
                self.name, "eBay requires a category; add one to the template's category mapping"
            )

        sku = self._sku(content)
        await self._put_inventory_item(sku, content)

        response = await self._send(
            "POST", self._url("/offer"), json=self._offer_payload(sku, content), headers=self._headers
        )
        if not response.is_success:
            raise self._rejected(response, "Failed to create eBay offer")
        offer_id = response_json(response).get("offerId")
        if not offer_id:
            raise PlatformRejectedError(self.name, "eBay did not return an offer ID")

        response = await self._send(
            "POST", self._url(f"/offer/{offer_id}/publish"), headers=self._headers
        )
        if not response.is_success:
            raise self._rejected(response, "Failed to publish eBay offer")
        listing_id = response_json(response).get("listingId")

        logger.info("ebay_listing_published", offer_id=offer_id, listing_id=listing_id)
        return PublishedListing(
            external_listing_id=str(offer_id),
            listing_url=ITEM_URL.format(id=listing_id) if listing_id else None,
        )

    async def update_listing(self, external_listing_id: str, content: ListingContent) -> PublishedListing:
        self.require_credentials()

        offer = await self._get_offer(external_listing_id)
        if offer is None:
            raise PlatformRejectedError(self.name, "listing no longer exists on eBay", status_code=404)

        sku = offer.get("sku") or self._sku(content)
        await self._put_inventory_item(sku, content)

        payload = self._offer_payload(sku, content)
        if not content.category and offer.get("categoryId"):
            payload["categoryId"] = offer["categoryId"]
        response = await self._send(
            "PUT", self._url(f"/offer/{external_listing_id}"), json=payload, headers=self._headers
        )
        if not response.is_success:
            raise self._rejected(response, "Failed to update eBay offer")

        listing_id = (offer.get("listing") or {}).get("listingId")
        return PublishedListing(
            external_listing_id=external_listing_id,
            listing_url=ITEM_URL.format(id=listing_id) if listing_id else None,
        )

    async def delete_listing(self, external_listing_id: str) -> DeleteOutcome:
        self.require_credentials()

        response = await self._send(
            "DELETE", self._url(f"/offer/{external_listing_id}"), headers=self._headers
        )
        if response.status_code == 404:
            logger.info("ebay_offer_already_gone", offer_id=external_listing_id)
            return DeleteOutcome.NOT_FOUND
        if not response.is_success:
            raise self._rejected(response, "Failed to end eBay listing")
        return DeleteOutcome.DELETED

    async def get_listing_status(self, external_listing_id: str) -> RemoteListingStatus:
        self.require_credentials()

        offer = await self._get_offer(external_listing_id)
        if offer is None:
            return RemoteListingStatus(status=RemoteStatus.REMOVED)

        listing = offer.get("listing") or {}
        listing_id = listing.get("listingId")
        listing_url = ITEM_URL.format(id=listing_id) if listing_id else None

        if offer.get("status") != "PUBLISHED":
            return RemoteListingStatus(status=RemoteStatus.REMOVED, listing_url=listing_url)
        if listing.get("listingStatus") in _ENDED_LISTING_STATUSES:
            return RemoteListingStatus(status=RemoteStatus.REMOVED, listing_url=listing_url)
        return RemoteListingStatus(status=RemoteStatus.ACTIVE, listing_url=listing_url)

    async def _get_offer(self, offer_id: str) -> dict[str, Any] | None:
        response = await self._send("GET", self._url(f"/offer/{offer_id}"), headers=self._headers)
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise self._rejected(response, "Failed to read eBay offer")
        return response_json(response)

    async def _put_inventory_item(self, sku: str, content: ListingContent) -> None:
        payload = {
            "availability": {"shipToLocationAvailability": {"quantity": content.quantity}},
            "condition": content.condition.upper(),
            "product": {
                "title": content.title,
                "description": content.description,
                "imageUrls": list(content.images[:MAX_IMAGES]),
            },
        }
        response = await self._send(
            "PUT", self._url(f"/inventory_item/{sku}"), json=payload, headers=self._headers
        )
        if not response.is_success:
            raise self._rejected(response, "Failed to save eBay inventory item")

    def _offer_payload(self, sku: str, content: ListingContent) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sku": sku,
            "marketplaceId": MARKETPLACE_ID,
            "format": "FIXED_PRICE",
            "availableQuantity": content.quantity,
            "listingDescription": content.description,
            "pricingSummary": {"price": {"value": f"{content.price:.2f}", "currency": "USD"}},
            "listingPolicies": {k: self.credentials[k] for k in _POLICY_KEYS},
        }
        if content.category:
            payload["categoryId"] = content.category
        if self.credentials.get("merchantLocationKey"):
            payload["merchantLocationKey"] = self.credentials["merchantLocationKey"]
        return payload

    @staticmethod
    def _sku(content: ListingContent) -> str:
        return f"ls-{content.product_id}" if content.product_id else f"ls-{uuid.uuid4().hex}"

    def _error_message(self, response: httpx.Response) -> str | None:
        errors = response_json(response).get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return errors[0].get("longMessage") or errors[0].get("message")
        return None
