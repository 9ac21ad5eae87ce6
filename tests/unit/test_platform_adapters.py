"""Adapter tests against canned HTTP responses (httpx.MockTransport)."""
import json
from decimal import Decimal
from typing import Any, Callable

import httpx
import pytest

from listing_sync.application.interfaces.platform_adapter import (
    DeleteOutcome,
    PlatformRejectedError,
    UnsupportedPlatformError,
)
from listing_sync.domain.entities.platform import Platform
from listing_sync.domain.enums.listing_status import RemoteStatus
from listing_sync.domain.templating.template_engine import ListingContent
from listing_sync.infrastructure.platforms.craigslist import CraigslistAdapter
from listing_sync.infrastructure.platforms.facebook import AUTH_ERROR_MESSAGE, FacebookMarketplaceAdapter
from listing_sync.infrastructure.platforms.factory import create_platform_service

FACEBOOK = Platform(id="fb", name="facebook_marketplace", display_name="Facebook Marketplace")
EBAY = Platform(id="eb", name="ebay", display_name="eBay")
CRAIGSLIST = Platform(id="cl", name="craigslist", display_name="Craigslist")

FACEBOOK_CREDENTIALS = {"accessToken": "fb-token", "pageId": "page-1", "catalogId": "cat-1"}
EBAY_CREDENTIALS = {
    "userToken": "eb-token",
    "fulfillmentPolicyId": "f1",
    "paymentPolicyId": "p1",
    "returnPolicyId": "r1",
}


def _content(**overrides: Any) -> ListingContent:
    fields = {
        "title": "Mono Panel 400W",
        "description": "High efficiency panel",
        "price": Decimal("100.00"),
        "category": "12345",
        "images": ("https://cdn.example/a.jpg", "https://cdn.example/b.jpg"),
        "product_id": "p1",
    }
    fields.update(overrides)
    return ListingContent(**fields)


def _adapter(
    platform: Platform,
    credentials: dict[str, Any],
    handler: Callable[[httpx.Request], httpx.Response],
):
    return create_platform_service(platform, credentials, transport=httpx.MockTransport(handler))


class TestFacebookMarketplaceAdapter:
    @pytest.mark.asyncio
    async def test_create_posts_catalog_product(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "fb-123"})

        adapter = _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler)
        published = await adapter.create_listing(_content())

        assert published.external_listing_id == "fb-123"
        assert published.listing_url == "https://www.facebook.com/marketplace/item/fb-123"
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v20.0/cat-1/products"
        assert request.headers["Authorization"] == "Bearer fb-token"
        payload = json.loads(request.content)
        assert payload["price"] == 10000
        assert payload["image_url"] == "https://cdn.example/a.jpg"
        assert payload["additional_image_urls"] == ["https://cdn.example/b.jpg"]
        assert payload["retailer_id"].startswith("ls_p1_")

    @pytest.mark.asyncio
    async def test_create_requires_public_images(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        adapter = _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler)

        with pytest.raises(PlatformRejectedError, match="publicly accessible"):
            await adapter.create_listing(_content(images=("http://localhost:3000/a.jpg",)))

    @pytest.mark.asyncio
    async def test_create_without_credentials(self) -> None:
        adapter = _adapter(FACEBOOK, {"accessToken": "x"}, lambda r: httpx.Response(200))

        with pytest.raises(PlatformRejectedError, match="Invalid credentials"):
            await adapter.create_listing(_content())

    @pytest.mark.asyncio
    async def test_expired_token_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": {"code": 190, "message": "Session expired"}})

        adapter = _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler)

        with pytest.raises(PlatformRejectedError) as exc_info:
            await adapter.create_listing(_content())
        assert exc_info.value.message == AUTH_ERROR_MESSAGE
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self) -> None:
        responses = [httpx.Response(200, json={"success": True}), httpx.Response(404)]

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "DELETE"
            return responses.pop(0)

        adapter = _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler)

        assert await adapter.delete_listing("fb-123") == DeleteOutcome.DELETED
        assert await adapter.delete_listing("fb-123") == DeleteOutcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_graph_not_found_code(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": {"code": 100, "message": "Unsupported get request"}})

        adapter = _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler)

        assert await adapter.delete_listing("fb-123") == DeleteOutcome.NOT_FOUND
        assert (await adapter.get_listing_status("fb-123")).status == RemoteStatus.REMOVED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body,expected",
        [
            ({"availability": "in stock"}, RemoteStatus.ACTIVE),
            ({"availability": "out of stock"}, RemoteStatus.REMOVED),
            ({"availability": "in stock", "review_status": "PENDING"}, RemoteStatus.PENDING),
            ({"availability": "in stock", "review_status": "REJECTED"}, RemoteStatus.ERROR),
            ({"availability": "something new"}, RemoteStatus.ERROR),
        ],
    )
    async def test_status_mapping(self, body: dict[str, str], expected: RemoteStatus) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["fields"] == "availability,review_status"
            return httpx.Response(200, json=body)

        adapter = _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler)

        assert (await adapter.get_listing_status("fb-123")).status == expected

    @pytest.mark.asyncio
    async def test_unreachable_platform(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        adapter = _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler)

        with pytest.raises(PlatformRejectedError, match="Failed to reach"):
            await adapter.get_listing_status("fb-123")

    @pytest.mark.asyncio
    async def test_authenticate(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v20.0/me"
            return httpx.Response(200, json={"id": "user-9"})

        assert await _adapter(FACEBOOK, FACEBOOK_CREDENTIALS, handler).authenticate() is True


class TestEbayAdapter:
    @pytest.mark.asyncio
    async def test_create_publishes_offer(self) -> None:
        calls: list[tuple[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            if request.url.path.endswith("/publish"):
                return httpx.Response(200, json={"listingId": "L-1"})
            if request.url.path.endswith("/offer"):
                body = json.loads(request.content)
                assert body["categoryId"] == "12345"
                assert body["pricingSummary"]["price"]["value"] == "100.00"
                assert body["listingPolicies"]["returnPolicyId"] == "r1"
                return httpx.Response(201, json={"offerId": "O-1"})
            return httpx.Response(204)

        adapter = _adapter(EBAY, EBAY_CREDENTIALS, handler)
        published = await adapter.create_listing(_content())

        assert published.external_listing_id == "O-1"
        assert published.listing_url == "https://www.ebay.com/itm/L-1"
        assert calls == [
            ("PUT", "/sell/inventory/v1/inventory_item/ls-p1"),
            ("POST", "/sell/inventory/v1/offer"),
            ("POST", "/sell/inventory/v1/offer/O-1/publish"),
        ]

    @pytest.mark.asyncio
    async def test_create_requires_category(self) -> None:
        adapter = _adapter(EBAY, EBAY_CREDENTIALS, lambda r: httpx.Response(204))

        with pytest.raises(PlatformRejectedError, match="category"):
            await adapter.create_listing(_content(category=None))

    @pytest.mark.asyncio
    async def test_error_message_from_errors_list(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"errors": [{"longMessage": "The SKU is invalid."}]})

        adapter = _adapter(EBAY, EBAY_CREDENTIALS, handler)

        with pytest.raises(PlatformRejectedError) as exc_info:
            await adapter.create_listing(_content())
        assert exc_info.value.message == "The SKU is invalid."

    @pytest.mark.asyncio
    async def test_sandbox_host(self) -> None:
        hosts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            hosts.append(request.url.host)
            return httpx.Response(204)

        adapter = _adapter(EBAY, {**EBAY_CREDENTIALS, "sandbox": True}, handler)
        await adapter.delete_listing("O-1")

        assert hosts == ["api.sandbox.ebay.com"]

    @pytest.mark.asyncio
    async def test_status_of_published_offer(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"status": "PUBLISHED", "listing": {"listingId": "L-1", "listingStatus": "ACTIVE"}},
            )

        status = await _adapter(EBAY, EBAY_CREDENTIALS, handler).get_listing_status("O-1")

        assert status.status == RemoteStatus.ACTIVE
        assert status.listing_url == "https://www.ebay.com/itm/L-1"

    @pytest.mark.asyncio
    async def test_status_of_ended_or_missing_offer(self) -> None:
        ended = lambda r: httpx.Response(  # noqa: E731
            200, json={"status": "PUBLISHED", "listing": {"listingStatus": "ENDED"}}
        )
        missing = lambda r: httpx.Response(404)  # noqa: E731

        assert (await _adapter(EBAY, EBAY_CREDENTIALS, ended).get_listing_status("O-1")).status == RemoteStatus.REMOVED
        assert (await _adapter(EBAY, EBAY_CREDENTIALS, missing).get_listing_status("O-1")).status == RemoteStatus.REMOVED

    @pytest.mark.asyncio
    async def test_update_of_missing_offer(self) -> None:
        adapter = _adapter(EBAY, EBAY_CREDENTIALS, lambda r: httpx.Response(404))

        with pytest.raises(PlatformRejectedError) as exc_info:
            await adapter.update_listing("O-1", _content())
        assert exc_info.value.status_code == 404


class TestCraigslistAdapter:
    @pytest.mark.asyncio
    async def test_create_returns_manual_instructions(self) -> None:
        adapter = CraigslistAdapter(CRAIGSLIST, {"email": "seller@example.com"})

        published = await adapter.create_listing(_content())

        assert published.external_listing_id.startswith("craigslist_manual_")
        assert published.listing_url == "https://craigslist.org/post"
        assert published.warnings[0] == "Craigslist requires manual posting"
        assert "TITLE: Mono Panel 400W" in published.warnings[1]
        assert "PRICE: $100.00" in published.warnings[1]

    @pytest.mark.asyncio
    async def test_requires_email(self) -> None:
        adapter = CraigslistAdapter(CRAIGSLIST, {})

        assert await adapter.authenticate() is False
        with pytest.raises(PlatformRejectedError):
            await adapter.create_listing(_content())

    @pytest.mark.asyncio
    async def test_status_always_active(self) -> None:
        adapter = CraigslistAdapter(CRAIGSLIST, {"email": "seller@example.com"})

        assert (await adapter.get_listing_status("craigslist_manual_x")).status == RemoteStatus.ACTIVE
        assert await adapter.delete_listing("craigslist_manual_x") == DeleteOutcome.DELETED


class TestCreatePlatformService:
    def test_known_names(self) -> None:
        assert isinstance(create_platform_service(FACEBOOK, {}), FacebookMarketplaceAdapter)
        assert isinstance(create_platform_service(CRAIGSLIST, {}), CraigslistAdapter)

    def test_unknown_name(self) -> None:
        platform = Platform(id="ms", name="myspace", display_name="MySpace")

        with pytest.raises(UnsupportedPlatformError):
            create_platform_service(platform, {})
