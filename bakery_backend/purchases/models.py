# purchases/models.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES)


User = settings.AUTH_USER_MODEL


class Invoice(models.Model):
    """
    Supplier invoice header.

    Receiving is performed by purchases.services.receiving_service:
    - creates the Invoice + its lines
    - upserts catalog products from the lines
    - creates ONE StockBatch per line (the only way lots come into existence)

    Settlement:
    - status moves pending -> cleared when a ROS receipt carries an SR bill
      with this invoice number and a matching amount.
    """

    STATUS_PENDING = "pending"
    STATUS_CLEARED = "cleared"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CLEARED, "Cleared"),
    ]

    invoice_number = models.CharField(max_length=64, unique=True)
    invoice_date = models.DateField(db_index=True)

    store_name = models.CharField(max_length=255, blank=True, default="")
    customer_name = models.CharField(max_length=255, blank=True, default="")

    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    source_file = models.CharField(max_length=255, blank=True, default="")

    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_PENDING)

    received_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_received",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-invoice_date", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="invoice_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "invoice_date"], name="invoice_status_date_idx"),
        ]

    def clean(self):
        if not (self.invoice_number or "").strip():
            raise ValidationError({"invoice_number": "invoice_number is required"})

        if self.total_amount is not None and self.total_amount < Decimal("0.00"):
            raise ValidationError({"total_amount": "total_amount cannot be negative"})

    def save(self, *args, **kwargs):
        if self.invoice_number is not None:
            self.invoice_number = self.invoice_number.strip()

        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.invoice_number} ({self.invoice_date})"


class InvoiceItem(models.Model):
    """
    Supplier invoice line, stored as printed (item code, rate, uom).
    """

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    sl_no = models.PositiveIntegerField(default=0)
    item_code = models.CharField(max_length=64)
    item_name = models.CharField(max_length=255)
    hsn_code = models.CharField(max_length=32, blank=True, default="")

    quantity = models.PositiveIntegerField()
    uom = models.CharField(max_length=16, blank=True, default="")

    rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["sl_no", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="invoice_item_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(rate__gte=Decimal("0.00")),
                name="invoice_item_rate_nonnegative",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return _money(Decimal(str(self.quantity)) * Decimal(str(self.rate)))

    def __str__(self):
        return f"{self.item_code} x {self.quantity}"
