# products/models/product.py

from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable bakery product.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in StockBatch (one row per invoice line)
    - Available stock is derived from allocations (sales + returns)

    SHELF-LIFE POLICY:
    - shelf_life_days drives the effective expiry of EVERY lot of this product
    - null / 0 => non-perishable (sentinel expiry, see settings.NON_PERISHABLE_EXPIRY)
    - changing the policy reclassifies existing lots immediately (no stored expiry)
    """

    item_code = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    category = models.CharField(max_length=64, blank=True, default="")
    hsn_code = models.CharField(max_length=32, blank=True, default="")

    shelf_life_days = models.PositiveIntegerField(null=True, blank=True)

    invoice_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    sale_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    grm_value = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active", "name"], name="product_active_name_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.item_code})"

    def clean(self):
        if not (self.item_code or "").strip():
            raise ValidationError({"item_code": "item_code is required"})

        if self.invoice_price is not None and Decimal(self.invoice_price) < 0:
            raise ValidationError({"invoice_price": "invoice_price cannot be negative"})

    @property
    def is_perishable(self) -> bool:
        return bool(self.shelf_life_days)

    def expiry_for(self, invoice_date: date) -> date:
        """
        Effective expiry of a lot received on `invoice_date`, under the
        product's CURRENT shelf-life policy.
        """
        if not self.shelf_life_days:
            return settings.NON_PERISHABLE_EXPIRY
        return invoice_date + timedelta(days=int(self.shelf_life_days))

    def deactivate(self):
        """Soft-deactivate. Products are never deleted (lots reference them)."""
        if not self.is_active:
            return
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])

    def delete(self, *args, **kwargs):
        raise ValidationError("Products cannot be deleted; deactivate instead.")
