from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Platform:
    """A third-party marketplace listings can be published to. Reference data."""

    id: str
    name: str
    display_name: str
    is_active: bool = True
    supports_categories: bool = True
    supports_shipping_templates: bool = False
    requires_auth: bool = True
    api_endpoint: str | None = None
    sandbox_endpoint: str | None = None
    max_title_length: int = 100
    max_description_length: int = 5000
    max_images: int = 10


@dataclass(frozen=True)
class PlatformCredentials:
    """Provider-specific auth material one user stored for one platform."""

    id: str
    user_id: str
    platform_id: str
    credentials: dict[str, Any] = field(default_factory=dict)
