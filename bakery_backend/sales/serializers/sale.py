# sales/serializers/sale.py

"""
SALE SERIALIZERS

Read:
- SaleSerializer (+ nested SaleItemSerializer): immutable sale snapshot

Write (input only, the allocator computes everything else):
- RecordSaleInputSerializer: sale_date, payment_type, items[]
"""

from rest_framework import serializers

from sales.models import Sale, SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = [
            "id",
            "item_type",
            "product",
            "decoration",
            "batch",
            "name",
            "quantity",
            "unit_price",
            "total_price",
        ]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    staff = serializers.CharField(source="staff.get_username", read_only=True, default=None)

    class Meta:
        model = Sale
        fields = [
            "id",
            "sale_date",
            "payment_type",
            "product_total",
            "decoration_total",
            "total_amount",
            "total_cost",
            "staff",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class SaleLineInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(required=False, min_value=1)
    decoration_id = serializers.IntegerField(required=False, min_value=1)
    batch_id = serializers.IntegerField(
        required=False,
        min_value=1,
        allow_null=True,
        help_text="Pin the line to one lot; omit for FEFO allocation",
    )
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    name = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if bool(attrs.get("product_id")) == bool(attrs.get("decoration_id")):
            raise serializers.ValidationError(
                "Exactly one of product_id or decoration_id is required."
            )
        if attrs.get("decoration_id") and attrs.get("batch_id"):
            raise serializers.ValidationError("Decorations are not held in lots (batch_id not allowed).")
        return attrs


class RecordSaleInputSerializer(serializers.Serializer):
    sale_date = serializers.DateField()
    payment_type = serializers.ChoiceField(choices=Sale.PAYMENT_CHOICES)
    items = SaleLineInputSerializer(many=True, allow_empty=False)
