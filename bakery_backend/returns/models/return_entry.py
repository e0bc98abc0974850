# returns/models/return_entry.py

"""
RETURN (APPEND-ONLY ALLOCATION ROW + CREDIT LIFECYCLE)

One row per processed GRM (expiry return) or GVN (inbound damage) line.

Ledger role:
    available(batch) -= Σ Return.quantity (batch)

Credit lifecycle (written ONLY by reconciliation):
    pending -> received   (credit note line matched exactly)
    pending -> alert      (quantity mismatch, or no credit line for it)

GUARANTEES:
- Everything except credit_status / credit_status_changed_at is immutable.
- Transitions go through conditional updates (credit_status='pending'),
  never through save().
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from products.models import Product, StockBatch

User = settings.AUTH_USER_MODEL


class Return(models.Model):
    TYPE_GRM = "GRM"
    TYPE_GVN = "GVN"

    TYPE_CHOICES = [
        (TYPE_GRM, "GRM (expiry return)"),
        (TYPE_GVN, "GVN (damage)"),
    ]

    CREDIT_PENDING = "pending"
    CREDIT_RECEIVED = "received"
    CREDIT_ALERT = "alert"

    CREDIT_CHOICES = [
        (CREDIT_PENDING, "Pending"),
        (CREDIT_RECEIVED, "Received"),
        (CREDIT_ALERT, "Alert"),
    ]

    return_date = models.DateField(db_index=True)
    type = models.CharField(max_length=8, choices=TYPE_CHOICES)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="returns",
    )
    batch = models.ForeignKey(
        StockBatch,
        on_delete=models.PROTECT,
        related_name="returns",
    )

    quantity = models.PositiveIntegerField()

    invoice_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Invoice price per unit at time of return (snapshot).",
    )
    loss_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    rtd = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Return-to-distributor rate quoted on credit note lines.",
    )

    credit_status = models.CharField(
        max_length=16,
        choices=CREDIT_CHOICES,
        default=CREDIT_PENDING,
        db_index=True,
    )
    credit_status_changed_at = models.DateTimeField(null=True, blank=True)

    staff = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="returns",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["return_date", "id"]
        indexes = [
            models.Index(fields=["batch"], name="return_batch_idx"),
            models.Index(fields=["type", "return_date"], name="return_type_date_idx"),
            models.Index(fields=["credit_status", "type"], name="return_status_type_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_return_qty_gt_zero",
            ),
        ]

    _MUTABLE_FIELDS = {"credit_status", "credit_status_changed_at"}

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Return.objects.get(pk=self.pk)
            for field in self._meta.concrete_fields:
                if field.name in self._MUTABLE_FIELDS or field.primary_key:
                    continue
                if getattr(self, field.attname) != getattr(previous, field.attname):
                    raise ValidationError(f"Return field '{field.name}' is immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Return records are immutable")

    @property
    def reconciliation_date(self):
        """
        Date a credit note line must carry to match this return:
        - GRM: the lot's effective expiry (current shelf-life policy)
        - GVN: the damage date
        """
        if self.type == self.TYPE_GRM:
            return self.batch.expiry_date
        return self.return_date

    @property
    def item_code(self) -> str:
        return self.product.item_code

    def __str__(self):
        return f"{self.type} {self.pk} | {self.product} x {self.quantity} | {self.credit_status}"
