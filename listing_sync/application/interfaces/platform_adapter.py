from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from listing_sync.domain.entities.platform import Platform
from listing_sync.domain.enums.listing_status import RemoteStatus
from listing_sync.domain.templating.template_engine import ListingContent


class PlatformRejectedError(Exception):
    """The platform refused a call (bad payload, expired auth, rate limit, outage)."""

    def __init__(self, platform_name: str, message: str, status_code: int | None = None) -> None:
        self.platform_name = platform_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{platform_name}: {message}")


class UnsupportedPlatformError(Exception):
    def __init__(self, platform_name: str) -> None:
        self.platform_name = platform_name
        super().__init__(f"Unsupported platform: {platform_name}")


@dataclass(frozen=True)
class PublishedListing:
    external_listing_id: str
    listing_url: str | None = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class RemoteListingStatus:
    status: RemoteStatus
    last_modified: datetime | None = None
    listing_url: str | None = None
    detail: str | None = None


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"


class PlatformAdapter(ABC):
    """
    Platform I/O for listings on one marketplace, on behalf of one user.

    Adapters never touch the listing repository. Remote failures surface as
    PlatformRejectedError; a listing that is already gone is not a failure.
    """

    def __init__(self, platform: Platform, credentials: dict[str, Any] | None = None) -> None:
        self.platform = platform
        self.credentials: dict[str, Any] = credentials or {}

    @property
    def name(self) -> str:
        return self.platform.display_name

    def validate_credentials(self) -> bool:
        if not self.platform.requires_auth:
            return True
        return bool(self.credentials) and self.has_required_credentials()

    def require_credentials(self) -> None:
        if not self.validate_credentials():
            raise PlatformRejectedError(self.name, "Invalid credentials")

    @abstractmethod
    def has_required_credentials(self) -> bool:
        ...

    @abstractmethod
    async def authenticate(self) -> bool:
        """Cheap remote call proving the credentials work."""
        ...

    @abstractmethod
    async def create_listing(self, content: ListingContent) -> PublishedListing:
        ...

    @abstractmethod
    async def update_listing(self, external_listing_id: str, content: ListingContent) -> PublishedListing:
        ...

    @abstractmethod
    async def delete_listing(self, external_listing_id: str) -> DeleteOutcome:
        ...

    @abstractmethod
    async def get_listing_status(self, external_listing_id: str) -> RemoteListingStatus:
        """A listing the platform no longer knows reports RemoteStatus.REMOVED."""
        ...


AdapterFactory = Callable[[Platform, dict[str, Any] | None], PlatformAdapter]
