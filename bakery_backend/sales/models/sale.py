# sales/models/sale.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a recorded counter sale.

    GUARANTEES:
    - Immutable record once written (no status lifecycle, no edits)
    - Stock is allocated ONLY via products.services.ledger + sales.services.sale_service
    - Totals are computed server-side from the lines
    """

    PAYMENT_CASH = "cash"
    PAYMENT_UPI = "upi"
    PAYMENT_CARD = "card"

    PAYMENT_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_UPI, "UPI"),
        (PAYMENT_CARD, "Card"),
    ]

    sale_date = models.DateField(db_index=True)

    payment_type = models.CharField(max_length=16, choices=PAYMENT_CHOICES)

    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    product_total = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    decoration_total = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Σ invoice price (products) + cost price (decorations) of sold units.",
    )

    staff = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Staff member who recorded the sale",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sale_date", "-id"]
        indexes = [
            models.Index(fields=["sale_date", "payment_type"], name="sale_date_payment_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Sale records are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Sale records are immutable")

    def __str__(self):
        return f"Sale {self.pk} | {self.sale_date} | {self.total_amount}"
