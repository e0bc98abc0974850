# reconciliation/urls.py

"""
RECONCILIATION URLS

Credit notes + ROS receipts under /api/reconciliation/
"""

from django.urls import path

from reconciliation.views import (
    CreditNoteListCreateView,
    CreditNoteReconcileView,
    MissingCreditNotesView,
    MissingDocumentsView,
    RosReceiptListCreateView,
)

urlpatterns = [
    path("credit-notes/", CreditNoteListCreateView.as_view(), name="credit-notes"),
    path("credit-notes/reconcile/", CreditNoteReconcileView.as_view(), name="credit-notes-reconcile"),
    path("credit-notes/missing/", MissingCreditNotesView.as_view(), name="credit-notes-missing"),
    path("ros-receipts/", RosReceiptListCreateView.as_view(), name="ros-receipts"),
    path("ros-receipts/missing/", MissingDocumentsView.as_view(), name="ros-receipts-missing"),
]
