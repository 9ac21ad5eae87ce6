from abc import ABC, abstractmethod

from listing_sync.domain.entities.platform import PlatformCredentials


class CredentialStore(ABC):
    """Read-only port onto the credentials users saved per platform."""

    @abstractmethod
    async def get(self, user_id: str, platform_id: str) -> PlatformCredentials | None:
        ...
