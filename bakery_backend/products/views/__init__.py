# products/views/__init__.py

"""
Products views package exports.

Purpose:
- Central export point for router + path imports.
"""

from .product import DecorationViewSet, ProductViewSet
from .stock import AggregatedStockView, AvailableStockView

__all__ = [
    "AggregatedStockView",
    "AvailableStockView",
    "DecorationViewSet",
    "ProductViewSet",
]
