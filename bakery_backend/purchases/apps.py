# purchases/apps.py

"""
PURCHASES APP CONFIG

Supplier invoice receipt:
- Invoice + InvoiceItem (as printed)
- One StockBatch per line; catalog prices follow the latest invoice
"""

from django.apps import AppConfig


class PurchasesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "purchases"
    verbose_name = "Purchases"
