"""
PATH: reconciliation/models/__init__.py

Reconciliation models export surface.
"""

from .credit_note import CreditNote
from .ros_receipt import RosReceipt, RosReceiptClearedItem

__all__ = [
    "CreditNote",
    "RosReceipt",
    "RosReceiptClearedItem",
]
