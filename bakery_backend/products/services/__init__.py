from .catalog import get_product, infer_category_and_shelf_life, restock_decoration, update_shelf_life
from .exceptions import (
    ConflictError,
    InsufficientStockError,
    InsufficientUnexpiredStockError,
    InventoryError,
    NotFoundError,
)

__all__ = [
    "get_product",
    "infer_category_and_shelf_life",
    "restock_decoration",
    "update_shelf_life",
    "ConflictError",
    "InsufficientStockError",
    "InsufficientUnexpiredStockError",
    "InventoryError",
    "NotFoundError",
]
