# sales/apps.py

"""
SALES APP CONFIG

Sale allocator module:
- Immutable Sale + append-only SaleItem allocation rows
- FEFO lot allocation + decoration counter depletion
"""

from django.apps import AppConfig


class SalesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales"
    verbose_name = "Sales"
