from decimal import Decimal

from pydantic import BaseModel, Field

from listing_sync.domain.entities.listing_template import CustomListingData


class CustomListingDataSchema(BaseModel):
    """Per-platform overrides. ``product_*`` feed the template tokens, the rest replace rendered fields."""

    product_name: str | None = None
    product_sku: str | None = None
    product_description: str | None = None
    product_category: str | None = None
    title: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None

    def to_domain(self) -> CustomListingData:
        return CustomListingData(**self.model_dump())


class CreateListingsRequest(BaseModel):
    product_id: str = Field(min_length=1)
    platform_ids: list[str]
    template_ids: dict[str, str] = Field(default_factory=dict)
    custom_data: dict[str, CustomListingDataSchema] = Field(default_factory=dict)


class UpdateListingsRequest(BaseModel):
    product_id: str = Field(min_length=1)
    platform_ids: list[str] | None = None
    custom_data: dict[str, CustomListingDataSchema] = Field(default_factory=dict)


class DeleteListingsRequest(BaseModel):
    product_id: str = Field(min_length=1)
    platform_ids: list[str] | None = None


class SyncListingsRequest(BaseModel):
    product_id: str | None = None


class ClearErrorRequest(BaseModel):
    product_id: str = Field(min_length=1)
    platform_id: str = Field(min_length=1)


class CredentialCheckRequest(BaseModel):
    platform_id: str = Field(min_length=1)
