# reconciliation/views/__init__.py

from .credit_notes import CreditNoteListCreateView, CreditNoteReconcileView, MissingCreditNotesView
from .ros_receipts import MissingDocumentsView, RosReceiptListCreateView

__all__ = [
    "CreditNoteListCreateView",
    "CreditNoteReconcileView",
    "MissingCreditNotesView",
    "MissingDocumentsView",
    "RosReceiptListCreateView",
]
