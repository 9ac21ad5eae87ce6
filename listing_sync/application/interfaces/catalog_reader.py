from abc import ABC, abstractmethod

from listing_sync.domain.entities.listing_template import ListingTemplate
from listing_sync.domain.entities.platform import Platform
from listing_sync.domain.entities.product_snapshot import ProductSnapshot


class ProductCatalog(ABC):
    """Port onto the product catalog. Bundles come back with their components loaded."""

    @abstractmethod
    async def get_product(self, product_id: str) -> ProductSnapshot | None:
        ...


class PlatformCatalog(ABC):
    """Port onto platform and template reference data."""

    @abstractmethod
    async def get_platform(self, platform_id: str) -> Platform | None:
        ...

    @abstractmethod
    async def get_template(self, template_id: str) -> ListingTemplate | None:
        ...

    @abstractmethod
    async def list_templates(self, platform_id: str) -> list[ListingTemplate]:
        """All templates of a platform, in a stable order (oldest first)."""
        ...
