"""Errors raised by the product creation workflow."""

from __future__ import annotations


class ProductCreationError(Exception):
    """Base class for failures of the product creation workflow."""


class InvalidProductInput(ProductCreationError):
    """The request was rejected before any write was attempted."""


class DuplicateSKUPrefix(InvalidProductInput):
    def __init__(self, sku_prefix: str) -> None:
        super().__init__(f"product with sku '{sku_prefix}' already exists")
        self.sku_prefix = sku_prefix


class ProductCreationFailed(ProductCreationError):
    """A write inside the creation transaction failed and everything was rolled back.

    ``state`` names the last state the workflow reached before failing.
    """

    def __init__(self, state: str, attempted_task: str) -> None:
        super().__init__(f"failed to {attempted_task} (after state {state})")
        self.state = state
        self.attempted_task = attempted_task


class DuplicateProductSKU(InvalidProductInput):
    """A variant SKU generated from the input is already used by a live product."""

    def __init__(self, sku: str | None = None) -> None:
        if sku is None:
            message = "a product sku generated for this product already exists"
        else:
            message = f"product with sku '{sku}' already exists"
        super().__init__(message)
        self.sku = sku
