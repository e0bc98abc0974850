# returns/apps.py

"""
RETURNS APP CONFIG

Return / damage processor:
- GRM: expiry returns to the supplier (credited at the GRM loss rate)
- GVN: inbound damage write-offs
- Return rows are stock allocations; only credit_status ever changes
"""

from django.apps import AppConfig


class ReturnsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "returns"
    verbose_name = "Returns & Damages"
