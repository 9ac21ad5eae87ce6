"""Unit tests for the ProductListing entity."""
import pytest

from listing_sync.domain.entities.product_listing import ProductListing
from listing_sync.domain.enums.listing_status import ListingStatus
from listing_sync.domain.events.domain_events import ListingStatusChangedEvent
from listing_sync.domain.state_machine.listing_state_machine import InvalidStatusTransitionError


def _make_listing() -> ProductListing:
    return ProductListing.not_listed(product_id="p1", platform_id="ebay")


class TestMarkActive:
    def test_records_platform_identity(self) -> None:
        listing = _make_listing()
        listing.mark_active(
            triggered_by="user-1",
            external_listing_id="ext-9",
            listing_url="https://ebay.example/itm/9",
            content_snapshot={"title": "Panel"},
            template_id="t1",
        )

        assert listing.status == ListingStatus.ACTIVE
        assert listing.external_listing_id == "ext-9"
        assert listing.listing_url == "https://ebay.example/itm/9"
        assert listing.content_snapshot == {"title": "Panel"}
        assert listing.template_id == "t1"
        assert listing.last_synced_at is not None

    def test_clears_previous_error(self) -> None:
        listing = _make_listing()
        listing.mark_error("boom", triggered_by="user-1")
        listing.mark_active(triggered_by="user-1", external_listing_id="ext-1")

        assert listing.last_error is None

    def test_omitted_values_are_kept(self) -> None:
        listing = _make_listing()
        listing.mark_active(triggered_by="u", external_listing_id="ext-1", listing_url="https://x/1")
        listing.mark_active(triggered_by="u")

        assert listing.external_listing_id == "ext-1"
        assert listing.listing_url == "https://x/1"


class TestMarkError:
    def test_keeps_external_id(self) -> None:
        listing = _make_listing()
        listing.mark_active(triggered_by="u", external_listing_id="ext-1")
        listing.mark_error("token expired", triggered_by="u")

        assert listing.status == ListingStatus.ERROR
        assert listing.last_error == "token expired"
        assert listing.external_listing_id == "ext-1"


class TestMarkRemoved:
    def test_keeps_external_id_and_stamps_sync(self) -> None:
        listing = _make_listing()
        listing.mark_active(triggered_by="u", external_listing_id="ext-1")
        listing.mark_removed(triggered_by="sync")

        assert listing.status == ListingStatus.REMOVED
        assert listing.external_listing_id == "ext-1"
        assert listing.last_synced_at is not None

    def test_never_listed_cannot_be_removed(self) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            _make_listing().mark_removed(triggered_by="sync")


class TestEvents:
    def test_each_transition_emits_an_event(self) -> None:
        listing = _make_listing()
        listing.mark_error("no template", triggered_by="u")
        listing.mark_active(triggered_by="u", external_listing_id="ext-1")

        events = listing.collect_events()

        assert [type(e) for e in events] == [ListingStatusChangedEvent, ListingStatusChangedEvent]
        assert events[0].from_status == ListingStatus.NOT_LISTED
        assert events[0].to_status == ListingStatus.ERROR
        assert events[0].error == "no template"
        assert events[1].external_listing_id == "ext-1"

    def test_collect_clears_buffer(self) -> None:
        listing = _make_listing()
        listing.mark_pending(triggered_by="u")
        listing.collect_events()

        assert listing.collect_events() == []

    def test_same_status_emits_nothing(self) -> None:
        listing = _make_listing()
        listing.mark_active(triggered_by="u", external_listing_id="ext-1")
        listing.collect_events()

        listing.mark_active(triggered_by="sync", listing_url="https://x/2")
        listing.mark_error("a", triggered_by="u")
        listing.mark_error("b", triggered_by="u")

        events = listing.collect_events()
        assert len(events) == 1
        assert events[0].to_status == ListingStatus.ERROR
        assert listing.listing_url == "https://x/2"
        assert listing.last_error == "b"
