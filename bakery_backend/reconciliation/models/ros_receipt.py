# reconciliation/models/ros_receipt.py

"""
ROS RECEIPT (SUPPLIER SETTLEMENT)

A receipt lists settled bills:
- SR bills clear supplier invoices
- CN bills clear credit notes

RosReceiptClearedItem records what a receipt cleared. The natural key
(ros_receipt, item_type, item_id) makes reprocessing idempotent.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.db import models

from reconciliation.documents import ParsedBill

logger = logging.getLogger(__name__)


class RosReceipt(models.Model):
    receipt_number = models.CharField(max_length=64, unique=True)
    receipt_date = models.DateField(db_index=True)

    received_from = models.CharField(max_length=255, blank=True, default="")
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    payment_method = models.CharField(max_length=64, blank=True, default="")

    bills = models.JSONField(default=list, blank=True)
    source_file = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-receipt_date", "-id"]

    def parsed_bills(self) -> list[ParsedBill]:
        bills = []
        for index, raw in enumerate(self.bills if isinstance(self.bills, list) else []):
            try:
                bill_date = raw.get("bill_date")
                bills.append(
                    ParsedBill(
                        doc_type=str(raw["doc_type"]).strip().upper(),
                        bill_number=str(raw["bill_number"]).strip(),
                        amount=Decimal(str(raw["amount"])),
                        bill_date=date.fromisoformat(bill_date) if bill_date else None,
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation):
                logger.warning(
                    "Skipping malformed receipt bill",
                    extra={"ros_receipt_id": self.pk, "index": index},
                )
        return bills

    def __str__(self):
        return f"ROS {self.receipt_number} ({self.receipt_date})"


class RosReceiptClearedItem(models.Model):
    ITEM_INVOICE = "invoice"
    ITEM_CREDIT_NOTE = "credit_note"

    ITEM_TYPES = [
        (ITEM_INVOICE, "Invoice"),
        (ITEM_CREDIT_NOTE, "Credit note"),
    ]

    ros_receipt = models.ForeignKey(
        RosReceipt,
        on_delete=models.CASCADE,
        related_name="cleared_items",
    )
    item_type = models.CharField(max_length=16, choices=ITEM_TYPES)
    item_id = models.PositiveBigIntegerField()

    bill_number = models.CharField(max_length=64)
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    cleared_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["ros_receipt_id", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["ros_receipt", "item_type", "item_id"],
                name="uniq_ros_cleared_item",
            ),
        ]
        indexes = [
            models.Index(fields=["item_type", "item_id"], name="ros_cleared_item_idx"),
        ]

    def __str__(self):
        return f"{self.ros_receipt.receipt_number} -> {self.item_type}:{self.item_id}"
