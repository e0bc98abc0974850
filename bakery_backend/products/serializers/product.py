# products/serializers/product.py

"""
PRODUCT SERIALIZERS

Purpose:
- Read-only catalog representation (prices are driven by invoice intake).
- Shelf-life policy input (the only catalog field staff edit directly).
"""

from rest_framework import serializers

from products.models import Decoration, Product


class ProductSerializer(serializers.ModelSerializer):
    is_perishable = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "item_code",
            "name",
            "category",
            "hsn_code",
            "shelf_life_days",
            "is_perishable",
            "invoice_price",
            "sale_price",
            "grm_value",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DecorationSerializer(serializers.ModelSerializer):
    """
    Decoration master data. The stock counter is read-only here; it moves
    only through restock and sales.
    """

    class Meta:
        model = Decoration
        fields = [
            "id",
            "sku",
            "name",
            "category",
            "stock_quantity",
            "sale_price",
            "cost_price",
            "is_active",
        ]
        read_only_fields = ["id", "stock_quantity"]

    def validate(self, attrs):
        for name in ("sale_price", "cost_price"):
            if attrs.get(name) is not None and attrs[name] < 0:
                raise serializers.ValidationError({name: f"{name} cannot be negative"})
        return attrs


class RestockInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class ShelfLifeInputSerializer(serializers.Serializer):
    shelf_life_days = serializers.IntegerField(
        min_value=0,
        allow_null=True,
        help_text="Days from invoice date to expiry. null/0 marks the product non-perishable.",
    )
