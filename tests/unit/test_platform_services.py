import pytest

from listing_sync.application.exceptions import PlatformConfigurationError
from listing_sync.application.interfaces.platform_adapter import UnsupportedPlatformError
from listing_sync.application.services.platform_services import PlatformServices
from listing_sync.domain.entities.platform import Platform


def _make_services(harness, factory=None) -> PlatformServices:
    return PlatformServices(harness.platforms, harness.credentials, factory or harness._adapter_factory)


class TestResolveTemplate:
    @pytest.mark.asyncio
    async def test_default_template(self, harness) -> None:
        harness.add_platform("ebay")
        harness.add_template("ebay", "ebay-other")
        services = _make_services(harness)
        platform = await services.get_platform("ebay")

        assert (await services.resolve_template(platform)).id == "ebay-default"

    @pytest.mark.asyncio
    async def test_first_active_when_no_default(self, harness) -> None:
        harness.add_platform("ebay", with_template=False)
        harness.add_template("ebay", "retired", is_active=False)
        harness.add_template("ebay", "first")
        harness.add_template("ebay", "second")
        services = _make_services(harness)
        platform = await services.get_platform("ebay")

        assert (await services.resolve_template(platform)).id == "first"

    @pytest.mark.asyncio
    async def test_several_defaults_pick_first(self, harness) -> None:
        harness.add_platform("ebay")
        harness.add_template("ebay", "ebay-second-default", is_default=True)
        services = _make_services(harness)
        platform = await services.get_platform("ebay")

        assert (await services.resolve_template(platform)).id == "ebay-default"

    @pytest.mark.asyncio
    async def test_explicit_template_from_another_platform(self, harness) -> None:
        harness.add_platform("ebay")
        harness.add_platform("facebook")
        services = _make_services(harness)
        platform = await services.get_platform("ebay")

        with pytest.raises(PlatformConfigurationError):
            await services.resolve_template(platform, "facebook-default")

    @pytest.mark.asyncio
    async def test_no_templates(self, harness) -> None:
        harness.add_platform("ebay", with_template=False)
        services = _make_services(harness)
        platform = await services.get_platform("ebay")

        with pytest.raises(PlatformConfigurationError, match="no template available"):
            await services.resolve_template(platform)


class TestBuildAdapter:
    @pytest.mark.asyncio
    async def test_platform_without_auth_needs_no_credentials(self, harness) -> None:
        harness.add_platform("craigslist", with_credentials=False, requires_auth=False)
        services = _make_services(harness)
        platform = await services.get_platform("craigslist")

        adapter = await services.build_adapter(platform, "user-1")

        assert adapter is harness.adapters["craigslist"]
        assert harness.factory_calls == [("craigslist", None)]

    @pytest.mark.asyncio
    async def test_missing_credentials(self, harness) -> None:
        harness.add_platform("ebay", with_credentials=False)
        services = _make_services(harness)
        platform = await services.get_platform("ebay")

        with pytest.raises(PlatformConfigurationError, match="no credentials configured"):
            await services.build_adapter(platform, "user-1")

    @pytest.mark.asyncio
    async def test_unsupported_platform(self, harness) -> None:
        harness.add_platform("myspace")

        def factory(platform: Platform, credentials):
            raise UnsupportedPlatformError(platform.name)

        services = _make_services(harness, factory)
        platform = await services.get_platform("myspace")

        with pytest.raises(PlatformConfigurationError, match="Unsupported platform"):
            await services.build_adapter(platform, "user-1")

    @pytest.mark.asyncio
    async def test_unknown_platform(self, harness) -> None:
        with pytest.raises(PlatformConfigurationError, match="platform not found"):
            await _make_services(harness).get_platform("nope")
