"""Errors raised by the listing workflows.

Precondition errors abort a whole call. PlatformConfigurationError never
leaves a workflow: it is recorded against the one platform it concerns.
"""


class ProductNotFoundError(Exception):
    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found.")


class InvalidListingRequestError(Exception):
    pass


class PlatformNotFoundError(Exception):
    def __init__(self, platform_id: str) -> None:
        self.platform_id = platform_id
        super().__init__(f"Platform {platform_id} not found.")


class CredentialsNotFoundError(Exception):
    def __init__(self, platform_id: str) -> None:
        self.platform_id = platform_id
        super().__init__(f"No credentials found for platform {platform_id}.")


class ListingNotFoundError(Exception):
    def __init__(self, product_id: str, platform_id: str | None = None) -> None:
        where = f"product {product_id} on platform {platform_id}" if platform_id else str(product_id)
        super().__init__(f"Listing for {where} not found.")


class PlatformConfigurationError(Exception):
    """A platform cannot be used for this request (unknown, no template, no credentials)."""
