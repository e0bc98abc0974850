# products/apps.py

"""
PRODUCTS APP CONFIG

Catalog + stock ledger module:
- Product catalog (shelf-life policy, pricing)
- Decoration counter stock
- StockBatch ledger (derived availability, FEFO order)
"""

from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "products"
    verbose_name = "Products & Stock Ledger"
