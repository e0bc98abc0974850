# products/models/stock_batch.py

"""
STOCK BATCH (INVOICE-BASED LOT)

Represents ONE invoice line of received stock.

CANONICAL MODEL:
- StockBatch = one received lot
- quantity_received is immutable after creation
- NO stored remaining quantity:
    available = quantity_received - Σ sale_items.quantity - Σ returns.quantity
  (see products.services.ledger)
- expiry_date is computed from the product's CURRENT shelf-life policy
- Never deleted (sale items and returns reference it)
"""

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .product import Product


class StockBatch(models.Model):
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="stock_batches",
    )

    quantity_received = models.PositiveIntegerField(
        help_text="Quantity delivered (immutable)"
    )

    invoice_date = models.DateField(db_index=True)
    invoice_reference = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Supplier invoice number this lot came from",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["invoice_date", "id"]
        indexes = [
            models.Index(fields=["product", "invoice_date"], name="stockbatch_product_date_idx"),
            models.Index(fields=["invoice_reference"], name="stockbatch_invoice_ref_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_received__gt=0),
                name="chk_stockbatch_qty_received_gt_zero",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if self.quantity_received is None or self.quantity_received <= 0:
            raise ValidationError(
                {"quantity_received": "quantity_received must be greater than zero"}
            )

        if not self.invoice_date:
            raise ValidationError({"invoice_date": "invoice_date is required"})

    # -------------------------------------------------
    # IMMUTABILITY
    # -------------------------------------------------

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = StockBatch.objects.only(
                "quantity_received", "invoice_date", "product_id"
            ).get(pk=self.pk)

            if self.quantity_received != original.quantity_received:
                raise ValidationError({"quantity_received": "quantity_received is immutable"})
            if self.invoice_date != original.invoice_date:
                raise ValidationError({"invoice_date": "invoice_date is immutable"})
            if self.product_id != original.product_id:
                raise ValidationError({"product": "product is immutable"})

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Cannot delete StockBatch: lots are part of the audit trail.")

    # -------------------------------------------------
    # READ-ONLY HELPERS
    # -------------------------------------------------

    @property
    def expiry_date(self):
        return self.product.expiry_for(self.invoice_date)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | Lot {self.pk} | {self.invoice_date}"
