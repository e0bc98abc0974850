"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .decoration import Decoration
from .product import Product
from .stock_batch import StockBatch

__all__ = [
    "Decoration",
    "Product",
    "StockBatch",
]
