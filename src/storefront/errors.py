"""Application error taxonomy for the storefront.

Input-shape problems reuse Protean's ``ValidationError`` so that aggregate,
command and request validation all surface the same way. The classes below
cover the remaining failure modes an HTTP handler needs to tell apart.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Unauthorized(StorefrontError):
    """Raised when a request carries no valid session."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(StorefrontError):
    """Raised when the session's profile lacks the required role."""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Raised when a referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, identifier: str):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class OutOfStockError(StorefrontError):
    """Raised when a cart references a variant that cannot be sold right now."""

    status_code = 409

    def __init__(self, variant_id: str, product_name: str | None = None):
        self.variant_id = variant_id
        self.product_name = product_name
        super().__init__(f"Product is out of stock: {product_name or variant_id}")


class UpstreamError(StorefrontError):
    """Raised when the payment or fulfillment provider fails or is not configured."""

    status_code = 502

    def __init__(self, provider: str, message: str, upstream_status: int | None = None):
        self.provider = provider
        self.upstream_status = upstream_status
        super().__init__(f"{provider}: {message}")
