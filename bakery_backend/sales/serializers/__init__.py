# sales/serializers/__init__.py

from .sale import RecordSaleInputSerializer, SaleItemSerializer, SaleLineInputSerializer, SaleSerializer

__all__ = [
    "RecordSaleInputSerializer",
    "SaleItemSerializer",
    "SaleLineInputSerializer",
    "SaleSerializer",
]
