# reconciliation/services/credit_note_intake.py

"""
======================================================
PATH: reconciliation/services/credit_note_intake.py
======================================================
CREDIT NOTE INTAKE

One upload (one source document, already split by return date):
1) every note is validated before anything is written
2) per note:
   - existing (number, return_date) -> ConflictError, reported as a warning
       * same source file: expected re-submit of a split note
       * different source file: duplicate upload
   - store the CreditNote row
   - reverse-clear it against existing ROS receipts
3) ONE reconciliation run over the lines of every stored note, so a
   return credited by any note in the upload is matched before leftovers
   on the covered dates are alerted

GUARANTEES:
- Store, clear and reconcile share one transaction; a failure leaves
  nothing stored and the upload can be retried.
- The outcome does not depend on the order of notes in the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from products.services.exceptions import ConflictError
from reconciliation.documents import ParsedCreditNote
from reconciliation.models import CreditNote
from reconciliation.services.credit_note_matcher import ReconciliationResult, reconcile_credit_note
from reconciliation.services.settlement_service import clear_credit_note_from_receipts, parse_month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredCreditNote:
    """A stored note with its share of the upload's reconciliation run."""

    credit_note: CreditNote
    reconciliation: ReconciliationResult


@dataclass
class IntakeResult:
    stored: list[StoredCreditNote] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    # Whole run, including leftovers alerted on the covered dates.
    reconciliation: ReconciliationResult | None = None


def _validate(parsed: ParsedCreditNote) -> None:
    if not (parsed.credit_note_number or "").strip():
        raise ValidationError({"credit_note_number": "credit_note_number is required"})
    if parsed.return_date is None:
        raise ValidationError({"return_date": "return_date is required"})
    for i, item in enumerate(parsed.items):
        if not (item.item_code or "").strip():
            raise ValidationError(f"items[{i}]: item_code is required")
        if int(item.quantity or 0) <= 0:
            raise ValidationError(f"items[{i}]: quantity must be greater than zero")


def _store(parsed: ParsedCreditNote, source_file: str) -> CreditNote:
    number = parsed.credit_note_number.strip()

    existing = CreditNote.objects.filter(
        credit_note_number=number,
        return_date=parsed.return_date,
    ).first()
    if existing is not None:
        if existing.source_file == source_file:
            raise ConflictError(
                f"Credit note {number} with return date {parsed.return_date} "
                "already exists from the same file, skipped"
            )
        raise ConflictError(
            f"Credit note {number} with return date {parsed.return_date} "
            "already exists from a different file"
        )

    try:
        with transaction.atomic():
            return CreditNote.objects.create(
                credit_note_number=number,
                date=parsed.date or parsed.return_date,
                return_date=parsed.return_date,
                receiver_name=parsed.receiver_name or "",
                receiver_gstin=parsed.receiver_gstin or "",
                reason=parsed.reason or "",
                total_items=len(parsed.items),
                gross_value=parsed.gross_value or Decimal("0.00"),
                net_value=parsed.net_value or Decimal("0.00"),
                source_file=source_file or "",
                items=[item.as_json() for item in parsed.items],
            )
    except IntegrityError as exc:
        raise ConflictError(
            f"Credit note {number} with return date {parsed.return_date} already exists"
        ) from exc


def _note_share(run: ReconciliationResult, note: CreditNote, start: int, end: int) -> ReconciliationResult:
    matches = run.matches[start:end]
    entry_ids = {m.entry.pk for m in matches if m.entry is not None}
    return ReconciliationResult(
        credit_note_number=note.credit_note_number,
        matches=matches,
        mismatches=[m for m in run.mismatches if m.return_id in entry_ids],
        received_ids=[i for i in run.received_ids if i in entry_ids],
        alerted_ids=[i for i in run.alerted_ids if i in entry_ids],
    )


def store_credit_notes(parsed_notes: Sequence[ParsedCreditNote], *, source_file: str = "") -> IntakeResult:
    for parsed in parsed_notes:
        _validate(parsed)

    result = IntakeResult()
    notes: list[CreditNote] = []

    with transaction.atomic():
        for parsed in parsed_notes:
            try:
                note = _store(parsed, source_file)
            except ConflictError as exc:
                logger.warning(
                    "Credit note not stored",
                    extra={
                        "credit_note_number": parsed.credit_note_number,
                        "return_date": str(parsed.return_date),
                        "source_file": source_file,
                    },
                )
                result.warnings.append(str(exc))
                continue

            clear_credit_note_from_receipts(note)
            note.refresh_from_db(fields=["status"])
            notes.append(note)

        if notes:
            lines_per_note = [note.parsed_items() for note in notes]
            numbers = list(dict.fromkeys(note.credit_note_number for note in notes))

            run = reconcile_credit_note(
                [line for lines in lines_per_note for line in lines],
                credit_note_number=", ".join(numbers),
            )
            result.reconciliation = run

            start = 0
            for note, lines in zip(notes, lines_per_note):
                end = start + len(lines)
                result.stored.append(
                    StoredCreditNote(credit_note=note, reconciliation=_note_share(run, note, start, end))
                )
                start = end

    logger.info(
        "Credit notes uploaded",
        extra={
            "source_file": source_file,
            "stored": len(result.stored),
            "warnings": len(result.warnings),
        },
    )
    return result


def list_credit_notes(month: str):
    year, mon = parse_month(month)
    return CreditNote.objects.filter(date__year=year, date__month=mon).order_by("-date", "-id")
