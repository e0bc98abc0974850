# sales/models/sale_item.py

"""
SALE ITEM (APPEND-ONLY ALLOCATION ROW)

One row per (lot, quantity) allocation of a product line, or one row per
decoration line.

Notes:
- Product rows ARE the stock ledger's sale allocations:
    available(batch) -= Σ SaleItem.quantity (batch)
- Decoration rows carry no batch (counter stock).
- Rows are never updated or deleted.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from products.models import Decoration, Product, StockBatch

from .sale import Sale

TWOPLACES = Decimal("0.01")


class SaleItem(models.Model):
    TYPE_PRODUCT = "product"
    TYPE_DECORATION = "decoration"

    TYPE_CHOICES = [
        (TYPE_PRODUCT, "Product"),
        (TYPE_DECORATION, "Decoration"),
    ]

    sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        related_name="items",
    )

    item_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_PRODUCT)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sale_items",
    )
    decoration = models.ForeignKey(
        Decoration,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sale_items",
    )
    batch = models.ForeignKey(
        StockBatch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sale_items",
    )

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, editable=False)

    name = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["batch"], name="saleitem_batch_idx"),
            models.Index(fields=["sale", "item_type"], name="saleitem_sale_type_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_saleitem_qty_gt_zero",
            ),
            models.CheckConstraint(
                condition=(
                    Q(item_type="product", product__isnull=False, batch__isnull=False)
                    | Q(item_type="decoration", decoration__isnull=False, batch__isnull=True)
                ),
                name="chk_saleitem_type_shape",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SaleItem records are immutable")

        self.total_price = (Decimal(self.unit_price) * Decimal(int(self.quantity or 0))).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("SaleItem records are immutable")

    def __str__(self):
        return f"{self.name or self.product or self.decoration} x {self.quantity}"
