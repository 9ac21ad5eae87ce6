from dataclasses import dataclass

import structlog

from listing_sync.application.exceptions import (
    CredentialsNotFoundError,
    PlatformConfigurationError,
    PlatformNotFoundError,
)
from listing_sync.application.interfaces.platform_adapter import PlatformRejectedError
from listing_sync.application.services.platform_services import NO_CREDENTIALS, PlatformServices

logger = structlog.get_logger(__name__)


@dataclass
class VerifyPlatformCredentialsInput:
    platform_id: str
    actor_id: str


@dataclass
class VerifyPlatformCredentialsOutput:
    platform_id: str
    platform_name: str
    authenticated: bool
    message: str


class VerifyPlatformCredentials:
    """Use case: check that the caller's stored credentials work on a platform."""

    def __init__(self, platform_services: PlatformServices) -> None:
        self._platforms = platform_services

    async def execute(
        self, input_data: VerifyPlatformCredentialsInput
    ) -> VerifyPlatformCredentialsOutput:
        try:
            platform = await self._platforms.get_platform(input_data.platform_id)
        except PlatformConfigurationError as exc:
            raise PlatformNotFoundError(input_data.platform_id) from exc

        try:
            adapter = await self._platforms.build_adapter(platform, input_data.actor_id)
        except PlatformConfigurationError as exc:
            if str(exc) == NO_CREDENTIALS:
                raise CredentialsNotFoundError(input_data.platform_id) from exc
            raise

        try:
            authenticated = await adapter.authenticate()
        except PlatformRejectedError as exc:
            logger.warning("platform_auth_check_failed", platform_id=platform.id, error=exc.message)
            authenticated = False

        return VerifyPlatformCredentialsOutput(
            platform_id=platform.id,
            platform_name=platform.display_name,
            authenticated=authenticated,
            message=(
                "Authentication successful"
                if authenticated
                else "Authentication failed - please check your credentials"
            ),
        )
