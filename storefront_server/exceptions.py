"""Storefront error types."""

from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""


class FetchError(StorefrontError):
    """The catalog API could not be reached or returned an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageDecodeError(StorefrontError):
    """The persisted cart snapshot is missing or corrupt."""


class NotFoundError(StorefrontError):
    """A product or cart line with the given id does not exist."""

    def __init__(self, kind: str, item_id: int) -> None:
        super().__init__(f"{kind} {item_id} not found")
        self.kind = kind
        self.item_id = item_id


class CheckoutError(StorefrontError, ValueError):
    """The order cannot be placed with the submitted data."""
