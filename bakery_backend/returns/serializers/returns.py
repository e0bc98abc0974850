# returns/serializers/returns.py

"""
RETURNS SERIALIZERS

Read:
- ReturnCandidateSerializer: a lot eligible for GRM / GVN on a date
- ReturnSerializer: a processed Return row
- ReturnSummarySerializer / PendingReturnGroupSerializer: service results

Write:
- ProcessReturnsInputSerializer: date + items[]
"""

from decimal import Decimal

from rest_framework import serializers

from returns.models import Return


class ReturnCandidateSerializer(serializers.Serializer):
    batch_id = serializers.IntegerField(source="batch.pk")
    product_id = serializers.IntegerField(source="batch.product_id")
    item_code = serializers.CharField(source="batch.product.item_code")
    name = serializers.CharField(source="batch.product.name")
    category = serializers.CharField(source="batch.product.category")
    hsn_code = serializers.CharField(source="batch.product.hsn_code")
    shelf_life_days = serializers.IntegerField(source="batch.product.shelf_life_days", allow_null=True)
    invoice_price = serializers.DecimalField(
        source="batch.product.invoice_price", max_digits=10, decimal_places=2
    )
    invoice_date = serializers.DateField(source="batch.invoice_date")
    invoice_reference = serializers.CharField(source="batch.invoice_reference")
    expiry_date = serializers.DateField()
    available_quantity = serializers.IntegerField()
    grm_value = serializers.DecimalField(max_digits=12, decimal_places=2)


class ReturnSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="product.item_code", read_only=True)
    name = serializers.CharField(source="product.name", read_only=True)
    invoice_date = serializers.DateField(source="batch.invoice_date", read_only=True)
    invoice_reference = serializers.CharField(source="batch.invoice_reference", read_only=True)
    expiry_date = serializers.DateField(source="batch.expiry_date", read_only=True)

    class Meta:
        model = Return
        fields = [
            "id",
            "type",
            "return_date",
            "product",
            "batch",
            "item_code",
            "name",
            "quantity",
            "invoice_price",
            "loss_amount",
            "rtd",
            "credit_status",
            "credit_status_changed_at",
            "invoice_date",
            "invoice_reference",
            "expiry_date",
        ]
        read_only_fields = fields


class ReturnSummarySerializer(serializers.Serializer):
    total_items = serializers.IntegerField()
    total_quantity = serializers.IntegerField()
    total_loss = serializers.DecimalField(max_digits=12, decimal_places=2)
    return_ids = serializers.ListField(child=serializers.IntegerField())


class PendingReturnGroupSerializer(serializers.Serializer):
    return_type = serializers.CharField()
    product_id = serializers.IntegerField(source="product.pk")
    item_code = serializers.CharField(source="product.item_code")
    name = serializers.CharField(source="product.name")
    category = serializers.CharField(source="product.category")
    return_date = serializers.DateField()
    quantity = serializers.IntegerField()
    loss_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    return_ids = serializers.ListField(child=serializers.IntegerField())


class ReturnLineInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    batch_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    invoice_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))


class ProcessReturnsInputSerializer(serializers.Serializer):
    date = serializers.DateField(help_text="Return date (GRM) or damage date (GVN)")
    items = ReturnLineInputSerializer(many=True, allow_empty=False)
