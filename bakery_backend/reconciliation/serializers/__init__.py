# reconciliation/serializers/__init__.py

from .reconciliation import (
    CreditNoteSerializer,
    CreditNoteUploadSerializer,
    IntakeResultSerializer,
    MissingDocumentSerializer,
    MonthQuerySerializer,
    ReconcileInputSerializer,
    ReconciliationResultSerializer,
    RosReceiptInputSerializer,
    RosReceiptSerializer,
)

__all__ = [
    "CreditNoteSerializer",
    "CreditNoteUploadSerializer",
    "IntakeResultSerializer",
    "MissingDocumentSerializer",
    "MonthQuerySerializer",
    "ReconcileInputSerializer",
    "ReconciliationResultSerializer",
    "RosReceiptInputSerializer",
    "RosReceiptSerializer",
]
