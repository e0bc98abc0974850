# reconciliation/services/credit_note_matcher.py

"""
======================================================
PATH: reconciliation/services/credit_note_matcher.py
======================================================
CREDIT NOTE MATCHER

One matching function, one transition policy, used by every entry point
(credit note upload, explicit reconcile requests).

Matching (pure, deterministic):
- Lines are processed in order.
- Each line consumes the FIRST unconsumed pending return with:
    * same item_code
    * |rtd_return - rtd_line| < 0.01
    * date rule: return.reconciliation_date == line.return_date
      (GRM: lot's effective expiry, GVN: damage date)
- Outcome per line: perfect_match / quantity_mismatch / no_matching_return
- Pool entries never consumed are leftovers.

Transition policy (pending returns considered in the run):
    exact quantity match -> received
    quantity mismatch    -> alert (+ ReconciliationMismatch record)
    leftover             -> alert

GUARANTEES:
- Transitions are conditional updates on credit_status='pending';
  re-running a reconciliation changes nothing.
- received / alert never go back to pending.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from django.conf import settings
from django.db import transaction
from django.db.models import Max, Q
from django.utils import timezone

from products.models import Product
from reconciliation.documents import ParsedCreditNoteItem
from returns.models import Return

logger = logging.getLogger(__name__)

RTD_TOLERANCE = Decimal("0.01")

PERFECT_MATCH = "perfect_match"
QUANTITY_MISMATCH = "quantity_mismatch"
NO_MATCHING_RETURN = "no_matching_return"


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class LineMatch:
    line: ParsedCreditNoteItem
    outcome: str
    entry: Return | None = None


@dataclass(frozen=True)
class MatchResult:
    matches: list[LineMatch]
    leftovers: list[Return]


@dataclass(frozen=True)
class ReconciliationMismatch:
    """
    Non-fatal discrepancy: the credit note credits a different quantity
    than the return recorded. Drives the return to 'alert'.
    """

    return_id: int
    item_code: str
    reconciliation_date: date
    expected_quantity: int
    credited_quantity: int


@dataclass
class ReconciliationResult:
    credit_note_number: str = ""
    matches: list[LineMatch] = field(default_factory=list)
    mismatches: list[ReconciliationMismatch] = field(default_factory=list)
    received_ids: list[int] = field(default_factory=list)
    alerted_ids: list[int] = field(default_factory=list)

    @property
    def unmatched_lines(self) -> list[ParsedCreditNoteItem]:
        return [m.line for m in self.matches if m.outcome == NO_MATCHING_RETURN]


# ============================================================
# MATCHING (pure)
# ============================================================

def _is_candidate(entry: Return, line: ParsedCreditNoteItem) -> bool:
    if entry.item_code != line.item_code:
        return False
    if abs(Decimal(str(entry.rtd)) - Decimal(str(line.rtd))) >= RTD_TOLERANCE:
        return False
    return entry.reconciliation_date == line.return_date


def match_credit_note_lines(
    lines: Sequence[ParsedCreditNoteItem],
    pending_returns: Iterable[Return],
) -> MatchResult:
    """
    Greedy one-to-one matching of credit note lines against a pool of
    pending returns. The pool order decides ties, so callers pass it sorted.
    """
    pool = list(pending_returns)
    consumed: set[int] = set()
    matches: list[LineMatch] = []

    for line in lines:
        entry = next(
            (r for r in pool if r.pk not in consumed and _is_candidate(r, line)),
            None,
        )

        if entry is None:
            matches.append(LineMatch(line=line, outcome=NO_MATCHING_RETURN))
            continue

        consumed.add(entry.pk)
        outcome = PERFECT_MATCH if int(entry.quantity) == int(line.quantity) else QUANTITY_MISMATCH
        matches.append(LineMatch(line=line, outcome=outcome, entry=entry))

    leftovers = [r for r in pool if r.pk not in consumed]
    return MatchResult(matches=matches, leftovers=leftovers)


# ============================================================
# POOL + TRANSITIONS
# ============================================================

def _bounded_candidates(lo: date | None, hi: date | None) -> Q:
    """
    Database prefilter: pending returns whose reconciliation date can fall
    in [lo, hi]. Either bound may be open.

    - GVN: reconciliation date is the return date
    - GRM perishable: invoice_date <= expiry <= invoice_date + longest shelf life
    - GRM non-perishable: the sentinel expiry
    """
    gvn = Q(type=Return.TYPE_GVN)
    perishable = Q(type=Return.TYPE_GRM, batch__product__shelf_life_days__gt=0)

    if lo is not None:
        longest = Product.objects.aggregate(longest=Max("shelf_life_days"))["longest"] or 0
        gvn &= Q(return_date__gte=lo)
        perishable &= Q(
            batch__invoice_date__gte=lo - timedelta(days=min(longest, (lo - date.min).days))
        )
    if hi is not None:
        gvn &= Q(return_date__lte=hi)
        perishable &= Q(batch__invoice_date__lte=hi)

    candidates = gvn | perishable

    sentinel = settings.NON_PERISHABLE_EXPIRY
    if (lo is None or lo <= sentinel) and (hi is None or sentinel <= hi):
        candidates |= Q(type=Return.TYPE_GRM) & (
            Q(batch__product__shelf_life_days__isnull=True) | Q(batch__product__shelf_life_days=0)
        )
    return candidates


def pending_pool(
    *,
    dates: Iterable[date] = (),
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[Return]:
    """
    Pending returns considered in a run.

    Reconciliation date is computed (GRM follows the current shelf-life
    policy), so the database narrows by date bounds and the exact date
    check runs in Python.
    """
    windowed = date_from is not None or date_to is not None
    wanted = set(dates)

    if windowed:
        lo, hi = date_from, date_to
    elif wanted:
        lo, hi = min(wanted), max(wanted)
    else:
        return []

    qs = (
        Return.objects.filter(credit_status=Return.CREDIT_PENDING)
        .filter(_bounded_candidates(lo, hi))
        .select_related("product", "batch", "batch__product")
        .order_by("product__item_code", "return_date", "id")
    )

    pool = []
    for entry in qs:
        rec_date = entry.reconciliation_date
        if windowed:
            if date_from is not None and rec_date < date_from:
                continue
            if date_to is not None and rec_date > date_to:
                continue
            pool.append(entry)
        elif rec_date in wanted:
            pool.append(entry)
    return pool


def _transition(return_id: int, status: str) -> bool:
    updated = Return.objects.filter(
        pk=return_id,
        credit_status=Return.CREDIT_PENDING,
    ).update(credit_status=status, credit_status_changed_at=timezone.now())
    return updated == 1


def reconcile_credit_note(
    lines: Sequence[ParsedCreditNoteItem],
    *,
    date_from: date | None = None,
    date_to: date | None = None,
    credit_note_number: str = "",
) -> ReconciliationResult:
    """
    RECONCILE CREDIT NOTE LINES (atomic)

    Pool:
    - explicit window date_from..date_to when given
    - otherwise the dates the lines cover
    """
    result = ReconciliationResult(credit_note_number=credit_note_number)

    with transaction.atomic():
        pool = pending_pool(
            dates={line.return_date for line in lines},
            date_from=date_from,
            date_to=date_to,
        )
        matched = match_credit_note_lines(lines, pool)
        result.matches = matched.matches

        for m in matched.matches:
            if m.entry is None:
                continue

            if m.outcome == PERFECT_MATCH:
                if _transition(m.entry.pk, Return.CREDIT_RECEIVED):
                    result.received_ids.append(m.entry.pk)
                continue

            result.mismatches.append(
                ReconciliationMismatch(
                    return_id=m.entry.pk,
                    item_code=m.entry.item_code,
                    reconciliation_date=m.entry.reconciliation_date,
                    expected_quantity=int(m.entry.quantity),
                    credited_quantity=int(m.line.quantity),
                )
            )
            if _transition(m.entry.pk, Return.CREDIT_ALERT):
                result.alerted_ids.append(m.entry.pk)

        for entry in matched.leftovers:
            if _transition(entry.pk, Return.CREDIT_ALERT):
                result.alerted_ids.append(entry.pk)

    logger.info(
        "Credit note reconciled",
        extra={
            "credit_note_number": credit_note_number,
            "lines": len(lines),
            "received": len(result.received_ids),
            "alerted": len(result.alerted_ids),
            "mismatches": len(result.mismatches),
            "unmatched_lines": len(result.unmatched_lines),
        },
    )
    for mismatch in result.mismatches:
        logger.warning(
            "Credit note quantity mismatch",
            extra={
                "credit_note_number": credit_note_number,
                "return_id": mismatch.return_id,
                "item_code": mismatch.item_code,
                "expected": mismatch.expected_quantity,
                "credited": mismatch.credited_quantity,
            },
        )

    return result
