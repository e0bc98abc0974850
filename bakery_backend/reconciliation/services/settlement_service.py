# reconciliation/services/settlement_service.py

"""
======================================================
PATH: reconciliation/services/settlement_service.py
======================================================
SETTLEMENT (ROS RECEIPT) CLEARER

Canonical flow:
1) record_ros_receipt: get-or-create the receipt by number
2) clear_from_receipt: walk its bills
   - SR: Invoice with invoice_number == bill_number and
         |total_amount - amount| < 0.01 -> cleared
   - CN: every CreditNote row with credit_note_number == bill_number
         -> cleared
   - anything else: logged + skipped
3) One RosReceiptClearedItem per cleared document, upserted on
   (receipt, item_type, item_id)

Reverse direction:
- A credit note stored after its receipt is cleared by
  clear_credit_note_from_receipts.

GUARANTEES:
- Reprocessing a receipt never duplicates cleared items.
- Status updates go through querysets; Invoice/CreditNote rows are
  never re-saved here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Sequence

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from products.services.exceptions import ConflictError
from purchases.models import Invoice
from reconciliation.documents import ParsedBill, ParsedRosReceipt
from reconciliation.models import CreditNote, RosReceipt, RosReceiptClearedItem

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")
TWOPLACES = Decimal("0.01")
MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

DOC_INVOICE = "SR"
DOC_CREDIT_NOTE = "CN"


def parse_month(month: str) -> tuple[int, int]:
    if not MONTH_RE.match(month or ""):
        raise ValidationError({"month": "month must be YYYY-MM"})
    year, mon = month.split("-")
    return int(year), int(mon)


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass
class ClearingResult:
    cleared: list[RosReceiptClearedItem] = field(default_factory=list)
    skipped: list[ParsedBill] = field(default_factory=list)


@dataclass(frozen=True)
class ReceiptOutcome:
    receipt: RosReceipt
    created: bool
    clearing: ClearingResult


@dataclass(frozen=True)
class MissingDocument:
    """A bill on a receipt with no matching document in the system."""

    receipt_number: str
    receipt_date: date
    doc_type: str
    bill_number: str
    bill_date: date | None
    amount: Decimal


# ============================================================
# CLEARING
# ============================================================

def _record_cleared(receipt: RosReceipt, item_type: str, item_id: int, bill: ParsedBill):
    item, _ = RosReceiptClearedItem.objects.update_or_create(
        ros_receipt=receipt,
        item_type=item_type,
        item_id=item_id,
        defaults={"bill_number": bill.bill_number, "amount": bill.amount.quantize(TWOPLACES)},
    )
    return item


def _clear_invoice(receipt: RosReceipt, bill: ParsedBill):
    invoice = (
        Invoice.objects.select_for_update()
        .filter(invoice_number=bill.bill_number)
        .first()
    )
    if invoice is None:
        logger.info(
            "Receipt bill has no invoice",
            extra={"receipt_number": receipt.receipt_number, "bill_number": bill.bill_number},
        )
        return None

    if abs(invoice.total_amount - bill.amount) >= AMOUNT_TOLERANCE:
        logger.warning(
            "Receipt bill amount does not match invoice",
            extra={
                "receipt_number": receipt.receipt_number,
                "bill_number": bill.bill_number,
                "bill_amount": str(bill.amount),
                "invoice_amount": str(invoice.total_amount),
            },
        )
        return None

    Invoice.objects.filter(pk=invoice.pk).update(status=Invoice.STATUS_CLEARED)
    return [_record_cleared(receipt, RosReceiptClearedItem.ITEM_INVOICE, invoice.pk, bill)]


def _clear_credit_notes(receipt: RosReceipt, bill: ParsedBill):
    notes = list(
        CreditNote.objects.select_for_update()
        .filter(credit_note_number=bill.bill_number)
        .order_by("id")
    )
    if not notes:
        logger.info(
            "Receipt bill has no credit note",
            extra={"receipt_number": receipt.receipt_number, "bill_number": bill.bill_number},
        )
        return None

    CreditNote.objects.filter(pk__in=[n.pk for n in notes]).update(status=CreditNote.STATUS_CLEARED)
    return [
        _record_cleared(receipt, RosReceiptClearedItem.ITEM_CREDIT_NOTE, note.pk, bill)
        for note in notes
    ]


def clear_from_receipt(receipt: RosReceipt, bills: Sequence[ParsedBill]) -> ClearingResult:
    result = ClearingResult()

    with transaction.atomic():
        for bill in bills:
            doc_type = (bill.doc_type or "").strip().upper()

            if doc_type == DOC_INVOICE:
                cleared = _clear_invoice(receipt, bill)
            elif doc_type == DOC_CREDIT_NOTE:
                cleared = _clear_credit_notes(receipt, bill)
            else:
                logger.warning(
                    "Unknown receipt bill type",
                    extra={"receipt_number": receipt.receipt_number, "doc_type": bill.doc_type},
                )
                cleared = None

            if cleared:
                result.cleared.extend(cleared)
            else:
                result.skipped.append(bill)

    logger.info(
        "Receipt cleared",
        extra={
            "receipt_number": receipt.receipt_number,
            "cleared": len(result.cleared),
            "skipped": len(result.skipped),
        },
    )
    return result


def clear_credit_note_from_receipts(note: CreditNote) -> list[RosReceiptClearedItem]:
    """
    Reverse clearing: a credit note stored after the receipt that
    settles it is cleared against the already-recorded receipts.

    `bills__icontains` narrows receipts to those whose stored bills mention
    the number; the exact CN bill check runs on the parsed bills.
    """
    number = note.credit_note_number
    cleared = []

    with transaction.atomic():
        receipts = (
            RosReceipt.objects.select_for_update()
            .filter(bills__icontains=number)
            .order_by("id")
        )
        for receipt in receipts:
            for bill in receipt.parsed_bills():
                if bill.doc_type != DOC_CREDIT_NOTE or bill.bill_number != number:
                    continue
                CreditNote.objects.filter(pk=note.pk).update(status=CreditNote.STATUS_CLEARED)
                cleared.append(
                    _record_cleared(receipt, RosReceiptClearedItem.ITEM_CREDIT_NOTE, note.pk, bill)
                )

    if cleared:
        logger.info(
            "Credit note cleared by existing receipt",
            extra={"credit_note_id": note.pk, "credit_note_number": number},
        )
    return cleared


# ============================================================
# RECEIPT INTAKE
# ============================================================

def record_ros_receipt(parsed: ParsedRosReceipt, *, source_file: str = "") -> ReceiptOutcome:
    """
    RECORD ROS RECEIPT (idempotent)

    An existing receipt number is reused and its stored bills are cleared
    again; the cleared-item upsert keeps the result unchanged.
    """
    number = (parsed.receipt_number or "").strip()
    if not number:
        raise ValidationError({"receipt_number": "receipt_number is required"})
    if parsed.receipt_date is None:
        raise ValidationError({"receipt_date": "receipt_date is required"})

    try:
        with transaction.atomic():
            receipt, created = RosReceipt.objects.get_or_create(
                receipt_number=number,
                defaults={
                    "receipt_date": parsed.receipt_date,
                    "received_from": parsed.received_from or "",
                    "total_amount": parsed.total_amount or Decimal("0.00"),
                    "payment_method": parsed.payment_method or "",
                    "bills": [bill.as_json() for bill in parsed.bills],
                    "source_file": source_file or "",
                },
            )
            clearing = clear_from_receipt(receipt, receipt.parsed_bills())
    except IntegrityError as exc:
        raise ConflictError(f"ROS receipt {number} is being recorded concurrently") from exc

    if not created:
        logger.info("ROS receipt reprocessed", extra={"receipt_number": number})

    return ReceiptOutcome(receipt=receipt, created=created, clearing=clearing)


# ============================================================
# READ MODELS
# ============================================================

def list_ros_receipts(month: str):
    year, mon = parse_month(month)
    return (
        RosReceipt.objects.filter(receipt_date__year=year, receipt_date__month=mon)
        .prefetch_related("cleared_items")
        .order_by("-receipt_date", "-id")
    )


def _missing_from_system(month: str, doc_type: str, known_numbers) -> list[MissingDocument]:
    missing = []
    for receipt in list_ros_receipts(month):
        for bill in receipt.parsed_bills():
            if bill.doc_type != doc_type or bill.bill_number in known_numbers:
                continue
            missing.append(
                MissingDocument(
                    receipt_number=receipt.receipt_number,
                    receipt_date=receipt.receipt_date,
                    doc_type=bill.doc_type,
                    bill_number=bill.bill_number,
                    bill_date=bill.bill_date,
                    amount=bill.amount,
                )
            )
    return missing


def invoices_missing_from_system(month: str) -> list[MissingDocument]:
    known = set(Invoice.objects.values_list("invoice_number", flat=True))
    return _missing_from_system(month, DOC_INVOICE, known)


def credit_notes_missing_from_system(month: str) -> list[MissingDocument]:
    known = set(CreditNote.objects.values_list("credit_note_number", flat=True))
    return _missing_from_system(month, DOC_CREDIT_NOTE, known)
