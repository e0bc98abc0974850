# products/serializers/stock.py

"""
======================================================
PATH: products/serializers/stock.py
======================================================
STOCK LEDGER SERIALIZERS (READ-ONLY)

Output shapes for products.services.ledger results:
- BatchAvailability -> one lot with its derived available quantity
- ProductStock      -> per-product totals with next expiry
"""

from __future__ import annotations

from rest_framework import serializers


class StockQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False, help_text="Reference date (defaults to today)")
    product_id = serializers.IntegerField(required=False, min_value=1)
    expired = serializers.BooleanField(
        required=False,
        default=False,
        help_text="true -> only lots already expired on the reference date",
    )


class BatchAvailabilitySerializer(serializers.Serializer):
    batch_id = serializers.IntegerField(source="batch.pk")
    product_id = serializers.IntegerField(source="batch.product_id")
    item_code = serializers.CharField(source="batch.product.item_code")
    name = serializers.CharField(source="batch.product.name")
    category = serializers.CharField(source="batch.product.category")
    shelf_life_days = serializers.IntegerField(source="batch.product.shelf_life_days", allow_null=True)
    invoice_price = serializers.DecimalField(
        source="batch.product.invoice_price", max_digits=10, decimal_places=2
    )
    sale_price = serializers.DecimalField(
        source="batch.product.sale_price", max_digits=10, decimal_places=2
    )
    invoice_date = serializers.DateField(source="batch.invoice_date")
    invoice_reference = serializers.CharField(source="batch.invoice_reference")
    expiry_date = serializers.DateField()
    available_quantity = serializers.IntegerField()


class AggregatedStockSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(source="product.pk")
    item_code = serializers.CharField(source="product.item_code")
    name = serializers.CharField(source="product.name")
    category = serializers.CharField(source="product.category")
    shelf_life_days = serializers.IntegerField(source="product.shelf_life_days", allow_null=True)
    sale_price = serializers.DecimalField(
        source="product.sale_price", max_digits=10, decimal_places=2
    )
    grm_value = serializers.DecimalField(
        source="product.grm_value", max_digits=10, decimal_places=2
    )
    total_available = serializers.IntegerField()
    next_expiry = serializers.DateField(allow_null=True)
