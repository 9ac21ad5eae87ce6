"""
Craigslist has no posting API, so this adapter hands back manual posting
instructions and always reports the listing as active.
"""
import uuid

import structlog

from listing_sync.application.interfaces.platform_adapter import (
    DeleteOutcome,
    PlatformAdapter,
    PublishedListing,
    RemoteListingStatus,
)
from listing_sync.domain.enums.listing_status import RemoteStatus
from listing_sync.domain.templating.template_engine import ListingContent

logger = structlog.get_logger(__name__)

POST_URL = "https://craigslist.org/post"
ACCOUNT_URL = "https://accounts.craigslist.org/login"


def posting_instructions(content: ListingContent) -> str:
    images = "\n".join(f"{i}. {url}" for i, url in enumerate(content.images, start=1))
    return (
        "CRAIGSLIST POSTING INSTRUCTIONS:\n\n"
        f"1. Go to: {POST_URL}\n"
        "2. Select your city/region\n"
        "3. Choose category: for sale > (appropriate category)\n"
        "4. Fill in the form with:\n\n"
        f"TITLE: {content.title}\n\n"
        f"PRICE: ${content.price:.2f}\n\n"
        f"DESCRIPTION:\n{content.description}\n\n"
        f"Condition: {content.condition}\n\n"
        f"IMAGES: Upload the following images:\n{images or '(none)'}\n\n"
        "5. Add your contact information\n"
        "6. Review and post\n"
    )


class CraigslistAdapter(PlatformAdapter):
    def has_required_credentials(self) -> bool:
        return bool(self.credentials.get("email"))

    async def authenticate(self) -> bool:
        return self.validate_credentials()

    async def create_listing(self, content: ListingContent) -> PublishedListing:
        self.require_credentials()
        external_id = f"craigslist_manual_{uuid.uuid4().hex}"
        logger.info("craigslist_manual_posting_prepared", external_listing_id=external_id)
        return PublishedListing(
            external_listing_id=external_id,
            listing_url=POST_URL,
            warnings=(
                "Craigslist requires manual posting",
                posting_instructions(content),
            ),
        )

    async def update_listing(self, external_listing_id: str, content: ListingContent) -> PublishedListing:
        return PublishedListing(
            external_listing_id=external_listing_id,
            warnings=("Craigslist updates must be done manually on the website",),
        )

    async def delete_listing(self, external_listing_id: str) -> DeleteOutcome:
        return DeleteOutcome.DELETED

    async def get_listing_status(self, external_listing_id: str) -> RemoteListingStatus:
        return RemoteListingStatus(status=RemoteStatus.ACTIVE, listing_url=ACCOUNT_URL)
