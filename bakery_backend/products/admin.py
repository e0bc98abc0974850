# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock ledger):

- Products are created by invoice intake; staff may edit catalog metadata and
  the shelf-life policy, never delete.
- StockBatch rows come ONLY from invoice intake and are read-only here.
  Availability is derived (sales + returns), so the admin shows it computed.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Decoration, Product, StockBatch
from products.services.ledger import batch_availability


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "item_code",
        "name",
        "category",
        "shelf_life_days",
        "invoice_price",
        "sale_price",
        "is_active",
    )
    list_filter = ("category", "is_active")
    search_fields = ("item_code", "name")
    readonly_fields = ("invoice_price", "sale_price", "grm_value", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Decoration)
class DecorationAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "category", "stock_quantity", "sale_price", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("sku", "name")


@admin.register(StockBatch)
class StockBatchAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "product",
        "invoice_date",
        "invoice_reference",
        "quantity_received",
        "expiry",
        "available",
    )
    list_filter = ("invoice_date",)
    search_fields = ("product__name", "product__item_code", "invoice_reference")
    list_select_related = ("product",)

    @admin.display(description="Expiry")
    def expiry(self, obj):
        return obj.expiry_date

    @admin.display(description="Available")
    def available(self, obj):
        return batch_availability(obj.pk).available_quantity

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
