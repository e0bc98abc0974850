# products/services/exceptions.py

"""
INVENTORY ENGINE ERRORS

Centralized domain errors shared by the ledger, sale allocator,
return processor and reconciliation services.

Input validation uses django.core.exceptions.ValidationError and is raised
before any transaction opens.
"""


class InventoryError(Exception):
    """Base exception for all inventory engine failures."""


class NotFoundError(InventoryError):
    """Raised when a referenced product, decoration, batch or document does not exist."""


class ConflictError(InventoryError):
    """Raised when a document with the same natural key already exists."""


class InsufficientStockError(InventoryError):
    """
    Raised when a lot (or counter) cannot cover the requested quantity.

    Carries enough context for the caller to report which lot failed.
    """

    def __init__(
        self,
        message: str,
        *,
        product_id=None,
        batch_id=None,
        requested: int = 0,
        available: int = 0,
    ):
        super().__init__(message)
        self.product_id = product_id
        self.batch_id = batch_id
        self.requested = int(requested)
        self.available = int(available)


class InsufficientUnexpiredStockError(InsufficientStockError):
    """Raised when the unexpired lots of a product (FEFO walk) cannot cover the request."""
