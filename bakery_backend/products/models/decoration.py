# products/models/decoration.py

"""
DECORATION (NON-BATCHED COUNTER STOCK)

Candles, toppers, ribbons and similar add-ons:
- no lots, no expiry
- ONE stock counter (stock_quantity), depleted by conditional update only
- the counter never goes negative (DB check constraint + service guard)
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q


class Decoration(models.Model):
    sku = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=64, blank=True, default="")

    stock_quantity = models.PositiveIntegerField(default=0)

    sale_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    cost_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock_quantity__gte=0),
                name="chk_decoration_stock_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"
