# products/serializers/__init__.py

from .product import (
    DecorationSerializer,
    ProductSerializer,
    RestockInputSerializer,
    ShelfLifeInputSerializer,
)
from .stock import (
    AggregatedStockSerializer,
    BatchAvailabilitySerializer,
    StockQuerySerializer,
)

__all__ = [
    "AggregatedStockSerializer",
    "BatchAvailabilitySerializer",
    "DecorationSerializer",
    "ProductSerializer",
    "RestockInputSerializer",
    "ShelfLifeInputSerializer",
    "StockQuerySerializer",
]
