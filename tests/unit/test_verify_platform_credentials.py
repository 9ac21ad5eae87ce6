from unittest.mock import AsyncMock

import pytest

from listing_sync.application.exceptions import CredentialsNotFoundError, PlatformNotFoundError
from listing_sync.application.interfaces.platform_adapter import PlatformRejectedError


class TestVerifyPlatformCredentials:
    @pytest.mark.asyncio
    async def test_working_credentials(self, harness) -> None:
        harness.add_platform("ebay")

        result = await harness.orchestrator.verify_credentials("ebay", "user-1")

        assert result.authenticated is True
        assert result.platform_name == "Ebay"
        assert result.message == "Authentication successful"

    @pytest.mark.asyncio
    async def test_refused_credentials(self, harness) -> None:
        adapter = harness.add_platform("ebay")
        adapter.auth_result = False

        result = await harness.orchestrator.verify_credentials("ebay", "user-1")

        assert result.authenticated is False
        assert result.message == "Authentication failed - please check your credentials"

    @pytest.mark.asyncio
    async def test_rejection_reads_as_not_authenticated(self, harness) -> None:
        adapter = harness.add_platform("facebook")
        adapter.authenticate = AsyncMock(side_effect=PlatformRejectedError("Facebook", "Timeout"))

        result = await harness.orchestrator.verify_credentials("facebook", "user-1")

        assert result.authenticated is False

    @pytest.mark.asyncio
    async def test_unknown_platform(self, harness) -> None:
        with pytest.raises(PlatformNotFoundError):
            await harness.orchestrator.verify_credentials("myspace", "user-1")

    @pytest.mark.asyncio
    async def test_no_stored_credentials(self, harness) -> None:
        harness.add_platform("ebay", with_credentials=False)

        with pytest.raises(CredentialsNotFoundError):
            await harness.orchestrator.verify_credentials("ebay", "user-1")

    @pytest.mark.asyncio
    async def test_credentials_are_per_user(self, harness) -> None:
        harness.add_platform("ebay")

        with pytest.raises(CredentialsNotFoundError):
            await harness.orchestrator.verify_credentials("ebay", "someone-else")
