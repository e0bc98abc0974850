# reconciliation/apps.py

"""
RECONCILIATION APP CONFIG

Supplier credit reconciliation:
- Credit notes settle pending GRM / GVN returns (received / alert)
- ROS receipts clear invoices (SR bills) and credit notes (CN bills)
"""

from django.apps import AppConfig


class ReconciliationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "reconciliation"
    verbose_name = "Credit Reconciliation"
