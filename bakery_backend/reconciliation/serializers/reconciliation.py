# reconciliation/serializers/reconciliation.py

"""
RECONCILIATION SERIALIZERS

Write (parser output posted as JSON):
- CreditNoteUploadSerializer: notes[] already split by return date
- ReconcileInputSerializer: credit_note_id or explicit items + optional window
- RosReceiptInputSerializer: receipt header + bills[]

Read:
- CreditNoteSerializer: embedded items read through parsed_items()
- RosReceiptSerializer, ReconciliationResultSerializer, MissingDocumentSerializer
"""

from decimal import Decimal

from rest_framework import serializers

from reconciliation.documents import (
    ParsedBill,
    ParsedCreditNote,
    ParsedCreditNoteItem,
    ParsedRosReceipt,
)
from reconciliation.models import CreditNote, RosReceipt, RosReceiptClearedItem


# ============================================================
# INPUT
# ============================================================

class CreditNoteItemInputSerializer(serializers.Serializer):
    item_code = serializers.CharField(max_length=64)
    item_name = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    rtd = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=Decimal("0.00"))
    return_date = serializers.DateField()


class CreditNoteInputSerializer(serializers.Serializer):
    credit_note_number = serializers.CharField(max_length=64)
    date = serializers.DateField()
    return_date = serializers.DateField()
    receiver_name = serializers.CharField(required=False, allow_blank=True, default="")
    receiver_gstin = serializers.CharField(required=False, allow_blank=True, default="")
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    gross_value = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    net_value = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    items = CreditNoteItemInputSerializer(many=True, allow_empty=False)


class CreditNoteUploadSerializer(serializers.Serializer):
    source_file = serializers.CharField(required=False, allow_blank=True, default="")
    notes = CreditNoteInputSerializer(many=True, allow_empty=False)

    def to_documents(self) -> list[ParsedCreditNote]:
        notes = []
        for note in self.validated_data["notes"]:
            data = dict(note)
            items = [ParsedCreditNoteItem(**item) for item in data.pop("items")]
            notes.append(ParsedCreditNote(items=items, **data))
        return notes


class ReconcileInputSerializer(serializers.Serializer):
    credit_note_id = serializers.IntegerField(required=False)
    items = CreditNoteItemInputSerializer(many=True, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        has_note = attrs.get("credit_note_id") is not None
        has_items = bool(attrs.get("items"))

        if has_note == has_items:
            raise serializers.ValidationError("Provide exactly one of credit_note_id or items")

        if (attrs.get("date_from") is None) != (attrs.get("date_to") is None):
            raise serializers.ValidationError("date_from and date_to go together")

        if attrs.get("date_from") and attrs["date_from"] > attrs["date_to"]:
            raise serializers.ValidationError("date_from must not be after date_to")

        return attrs


class BillInputSerializer(serializers.Serializer):
    doc_type = serializers.ChoiceField(choices=["SR", "CN"])
    bill_number = serializers.CharField(max_length=64)
    bill_date = serializers.DateField(required=False, allow_null=True, default=None)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class RosReceiptInputSerializer(serializers.Serializer):
    receipt_number = serializers.CharField(max_length=64)
    receipt_date = serializers.DateField()
    received_from = serializers.CharField(required=False, allow_blank=True, default="")
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    payment_method = serializers.CharField(required=False, allow_blank=True, default="")
    source_file = serializers.CharField(required=False, allow_blank=True, default="")
    bills = BillInputSerializer(many=True, allow_empty=False)

    def to_document(self) -> ParsedRosReceipt:
        data = dict(self.validated_data)
        data.pop("source_file")
        bills = [ParsedBill(**bill) for bill in data.pop("bills")]
        return ParsedRosReceipt(bills=bills, **data)


class MonthQuerySerializer(serializers.Serializer):
    month = serializers.RegexField(r"^\d{4}-(0[1-9]|1[0-2])$", help_text="YYYY-MM")


# ============================================================
# OUTPUT
# ============================================================

class CreditNoteItemSerializer(serializers.Serializer):
    item_code = serializers.CharField()
    item_name = serializers.CharField()
    quantity = serializers.IntegerField()
    rtd = serializers.DecimalField(max_digits=6, decimal_places=2)
    return_date = serializers.DateField()


class CreditNoteSerializer(serializers.ModelSerializer):
    items = serializers.SerializerMethodField()

    class Meta:
        model = CreditNote
        fields = [
            "id",
            "credit_note_number",
            "date",
            "return_date",
            "receiver_name",
            "receiver_gstin",
            "reason",
            "total_items",
            "gross_value",
            "net_value",
            "source_file",
            "status",
            "items",
            "created_at",
        ]
        read_only_fields = fields

    def get_items(self, obj):
        return CreditNoteItemSerializer(obj.parsed_items(), many=True).data


class LineMatchSerializer(serializers.Serializer):
    item_code = serializers.CharField(source="line.item_code")
    quantity = serializers.IntegerField(source="line.quantity")
    rtd = serializers.DecimalField(source="line.rtd", max_digits=6, decimal_places=2)
    return_date = serializers.DateField(source="line.return_date")
    outcome = serializers.CharField()
    return_id = serializers.IntegerField(source="entry.pk", allow_null=True, default=None)


class ReconciliationMismatchSerializer(serializers.Serializer):
    return_id = serializers.IntegerField()
    item_code = serializers.CharField()
    reconciliation_date = serializers.DateField()
    expected_quantity = serializers.IntegerField()
    credited_quantity = serializers.IntegerField()


class ReconciliationResultSerializer(serializers.Serializer):
    credit_note_number = serializers.CharField()
    matches = LineMatchSerializer(many=True)
    mismatches = ReconciliationMismatchSerializer(many=True)
    received_ids = serializers.ListField(child=serializers.IntegerField())
    alerted_ids = serializers.ListField(child=serializers.IntegerField())


class StoredCreditNoteSerializer(serializers.Serializer):
    credit_note = CreditNoteSerializer()
    reconciliation = ReconciliationResultSerializer()


class IntakeResultSerializer(serializers.Serializer):
    stored = StoredCreditNoteSerializer(many=True)
    warnings = serializers.ListField(child=serializers.CharField())
    reconciliation = ReconciliationResultSerializer(allow_null=True)


class ClearedItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = RosReceiptClearedItem
        fields = ["id", "item_type", "item_id", "bill_number", "amount", "cleared_at"]
        read_only_fields = fields


class RosReceiptSerializer(serializers.ModelSerializer):
    cleared_items = ClearedItemSerializer(many=True, read_only=True)

    class Meta:
        model = RosReceipt
        fields = [
            "id",
            "receipt_number",
            "receipt_date",
            "received_from",
            "total_amount",
            "payment_method",
            "bills",
            "source_file",
            "cleared_items",
            "created_at",
        ]
        read_only_fields = fields


class MissingDocumentSerializer(serializers.Serializer):
    receipt_number = serializers.CharField()
    receipt_date = serializers.DateField()
    doc_type = serializers.CharField()
    bill_number = serializers.CharField()
    bill_date = serializers.DateField(allow_null=True)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
