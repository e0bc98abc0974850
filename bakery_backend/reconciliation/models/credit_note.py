# reconciliation/models/credit_note.py

"""
CREDIT NOTE (SUPPLIER CREDIT DOCUMENT)

One row per (credit_note_number, return_date): a printed credit note that
covers several return dates is stored as several rows.

items:
    JSON list of {itemCode, itemName, quantity, rtd, returnDate}
    Read through parsed_items(), which skips malformed entries.

Settlement:
    status pending -> cleared when a ROS receipt carries a CN bill with
    this number.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.db import models

from reconciliation.documents import ParsedCreditNoteItem

logger = logging.getLogger(__name__)


class CreditNote(models.Model):
    STATUS_PENDING = "pending"
    STATUS_CLEARED = "cleared"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CLEARED, "Cleared"),
    ]

    credit_note_number = models.CharField(max_length=64, db_index=True)
    date = models.DateField(help_text="Date printed on the credit note.")
    return_date = models.DateField(
        db_index=True,
        help_text="Return date the lines of this row cover.",
    )

    receiver_name = models.CharField(max_length=255, blank=True, default="")
    receiver_gstin = models.CharField(max_length=32, blank=True, default="")
    reason = models.CharField(max_length=255, blank=True, default="")

    total_items = models.PositiveIntegerField(default=0)
    gross_value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    net_value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    source_file = models.CharField(max_length=255, blank=True, default="")
    items = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-return_date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["credit_note_number", "return_date"],
                name="uniq_credit_note_number_return_date",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "date"], name="creditnote_status_date_idx"),
        ]

    def parsed_items(self) -> list[ParsedCreditNoteItem]:
        if not isinstance(self.items, list):
            logger.warning(
                "Credit note items is not a list",
                extra={"credit_note_id": self.pk},
            )
            return []

        lines = []
        for index, raw in enumerate(self.items):
            try:
                lines.append(
                    ParsedCreditNoteItem(
                        item_code=str(raw["itemCode"]).strip(),
                        item_name=str(raw.get("itemName") or ""),
                        quantity=int(raw["quantity"]),
                        rtd=Decimal(str(raw["rtd"])),
                        return_date=date.fromisoformat(
                            str(raw.get("returnDate") or self.return_date.isoformat())
                        ),
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation):
                logger.warning(
                    "Skipping malformed credit note item",
                    extra={"credit_note_id": self.pk, "index": index},
                )
        return lines

    def __str__(self):
        return f"CN {self.credit_note_number} ({self.return_date})"
