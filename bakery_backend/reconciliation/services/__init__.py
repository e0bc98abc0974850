"""
PATH: reconciliation/services/__init__.py

Public reconciliation operations.
"""

from .credit_note_intake import list_credit_notes, store_credit_notes
from .credit_note_matcher import match_credit_note_lines, reconcile_credit_note
from .settlement_service import (
    clear_from_receipt,
    credit_notes_missing_from_system,
    invoices_missing_from_system,
    list_ros_receipts,
    record_ros_receipt,
)

__all__ = [
    "clear_from_receipt",
    "credit_notes_missing_from_system",
    "invoices_missing_from_system",
    "list_credit_notes",
    "list_ros_receipts",
    "match_credit_note_lines",
    "reconcile_credit_note",
    "record_ros_receipt",
    "store_credit_notes",
]
