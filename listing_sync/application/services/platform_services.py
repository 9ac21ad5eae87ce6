import structlog

from listing_sync.application.exceptions import PlatformConfigurationError
from listing_sync.application.interfaces.catalog_reader import PlatformCatalog
from listing_sync.application.interfaces.credential_store import CredentialStore
from listing_sync.application.interfaces.platform_adapter import (
    AdapterFactory,
    PlatformAdapter,
    UnsupportedPlatformError,
)
from listing_sync.domain.entities.listing_template import ListingTemplate
from listing_sync.domain.entities.platform import Platform

logger = structlog.get_logger(__name__)

PLATFORM_NOT_FOUND = "platform not found"
NO_TEMPLATE = "no template available"
NO_CREDENTIALS = "no credentials configured"


class PlatformServices:
    """Resolves the platform, template, credentials and adapter for one unit of work."""

    def __init__(
        self,
        platforms: PlatformCatalog,
        credentials: CredentialStore,
        adapter_factory: AdapterFactory,
    ) -> None:
        self._platforms = platforms
        self._credentials = credentials
        self._adapter_factory = adapter_factory

    async def get_platform(self, platform_id: str) -> Platform:
        platform = await self._platforms.get_platform(platform_id)
        if platform is None or not platform.is_active:
            raise PlatformConfigurationError(PLATFORM_NOT_FOUND)
        return platform

    async def resolve_template(
        self, platform: Platform, template_id: str | None = None
    ) -> ListingTemplate:
        """
        Explicit template if given, else the platform's active default, else
        its first active template. Several defaults resolve to the first one.
        """
        if template_id is not None:
            template = await self._platforms.get_template(template_id)
            if template is None or template.platform_id != platform.id or not template.is_active:
                raise PlatformConfigurationError(
                    f"template {template_id} is not available for {platform.display_name}"
                )
            return template

        active = [t for t in await self._platforms.list_templates(platform.id) if t.is_active]
        if not active:
            raise PlatformConfigurationError(NO_TEMPLATE)

        defaults = [t for t in active if t.is_default]
        if len(defaults) > 1:
            logger.warning(
                "multiple_default_templates",
                platform_id=platform.id,
                template_ids=[t.id for t in defaults],
            )
        return defaults[0] if defaults else active[0]

    async def build_adapter(self, platform: Platform, user_id: str) -> PlatformAdapter:
        stored = await self._credentials.get(user_id, platform.id)
        if stored is None and platform.requires_auth:
            raise PlatformConfigurationError(NO_CREDENTIALS)
        try:
            return self._adapter_factory(platform, stored.credentials if stored else None)
        except UnsupportedPlatformError as exc:
            raise PlatformConfigurationError(str(exc)) from exc
