# purchases/api/serializers.py

from rest_framework import serializers

from purchases.documents import ParsedInvoice, ParsedInvoiceLine
from purchases.models import Invoice, InvoiceItem


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = ["id", "sl_no", "item_code", "item_name", "hsn_code", "quantity", "uom", "rate", "total"]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "invoice_date",
            "store_name",
            "customer_name",
            "total_amount",
            "source_file",
            "status",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class ParsedInvoiceLineSerializer(serializers.Serializer):
    sl_no = serializers.IntegerField(required=False, min_value=0, default=0)
    item_code = serializers.CharField(max_length=64)
    item_name = serializers.CharField(max_length=255)
    hsn_code = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    uom = serializers.CharField(required=False, allow_blank=True, default="")
    rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    total = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)


class ParsedInvoiceSerializer(serializers.Serializer):
    """
    Parser output posted as JSON. The source document itself stays outside
    the engine; only its reference is recorded.
    """

    invoice_number = serializers.CharField(max_length=64)
    invoice_date = serializers.DateField()
    store_name = serializers.CharField(required=False, allow_blank=True, default="")
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    source_file = serializers.CharField(required=False, allow_blank=True, default="")
    lines = ParsedInvoiceLineSerializer(many=True, allow_empty=False)

    def to_document(self) -> ParsedInvoice:
        data = self.validated_data
        return ParsedInvoice(
            invoice_number=data["invoice_number"],
            invoice_date=data["invoice_date"],
            total_amount=data["total_amount"],
            store_name=data["store_name"],
            customer_name=data["customer_name"],
            lines=[ParsedInvoiceLine(**line) for line in data["lines"]],
        )


class InvoiceMonthQuerySerializer(serializers.Serializer):
    month = serializers.RegexField(r"^\d{4}-(0[1-9]|1[0-2])$", required=False, help_text="YYYY-MM")
