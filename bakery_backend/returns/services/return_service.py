# returns/services/return_service.py

"""
======================================================
PATH: returns/services/return_service.py
======================================================
RETURN / DAMAGE PROCESSOR

Candidates (read-only):
- GRM: lots of PERISHABLE products whose effective expiry == date, with stock
- GVN: lots received (invoice_date) on date, with stock

Processing (atomic, all-or-nothing):
- One transaction for the whole request.
- Each line re-derives availability on the LOCKED lot.
- Any short line rolls back every line of the request.

Loss rules:
- GRM: loss = round2(quantity * invoice_price * GRM_LOSS_RATE), rtd = rate * 100
- GVN: loss = 0, rtd = 0
"""

from __future__ import annotations

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from products.models import Product, StockBatch
from products.services.exceptions import InsufficientStockError, NotFoundError
from products.services.ledger import BatchAvailability, available_batches, batch_availability
from returns.models import Return

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def grm_loss(quantity: int, invoice_price) -> Decimal:
    return _money(Decimal(int(quantity)) * Decimal(str(invoice_price)) * settings.GRM_LOSS_RATE)


def grm_rtd() -> Decimal:
    return _money(settings.GRM_LOSS_RATE * 100)


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class ReturnCandidate:
    entry: BatchAvailability
    grm_value: Decimal

    @property
    def batch(self) -> StockBatch:
        return self.entry.batch

    @property
    def available_quantity(self) -> int:
        return self.entry.available_quantity

    @property
    def expiry_date(self) -> date:
        return self.entry.expiry_date


@dataclass(frozen=True)
class ReturnSummary:
    total_items: int
    total_quantity: int
    total_loss: Decimal = Decimal("0.00")
    return_ids: tuple = ()


@dataclass
class PendingReturnGroup:
    return_type: str
    product: Product
    return_date: date
    quantity: int = 0
    loss_amount: Decimal = Decimal("0.00")
    return_ids: list = field(default_factory=list)


@dataclass(frozen=True)
class _ReturnLine:
    product_id: int
    batch_id: int
    quantity: int
    invoice_price: Decimal


# ============================================================
# CANDIDATES
# ============================================================

def _candidates(entries) -> list[ReturnCandidate]:
    return [
        ReturnCandidate(
            entry=e,
            grm_value=grm_loss(e.available_quantity, e.batch.product.invoice_price),
        )
        for e in sorted(entries, key=lambda e: (e.batch.product.name, e.batch.pk))
    ]


def list_grm_candidates(on_date: date) -> list[ReturnCandidate]:
    entries = available_batches(reference_date=on_date, include_expired=True)
    return _candidates(
        e for e in entries if e.batch.product.is_perishable and e.expiry_date == on_date
    )


def list_gvn_candidates(on_date: date) -> list[ReturnCandidate]:
    entries = available_batches(reference_date=on_date, include_expired=True)
    return _candidates(e for e in entries if e.batch.invoice_date == on_date)


def processed_returns(return_type: str, on_date: date):
    """Return rows already written for `on_date` (shown beside the candidates)."""
    return (
        Return.objects.filter(type=return_type, return_date=on_date)
        .select_related("product", "batch", "batch__product")
        .order_by("id")
    )


# ============================================================
# VALIDATION (before any transaction)
# ============================================================

def _validate_lines(items) -> list[_ReturnLine]:
    if not items:
        raise ValidationError({"items": "at least one item is required"})

    lines = []
    for item in items:
        try:
            product_id = int(item["product_id"])
            batch_id = int(item["batch_id"])
            quantity = item["quantity"]
            invoice_price = _money(item["invoice_price"])
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise ValidationError("Invalid item data") from exc

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Invalid item data")
        if invoice_price <= Decimal("0.00"):
            raise ValidationError("Invalid item data")

        lines.append(
            _ReturnLine(
                product_id=product_id,
                batch_id=batch_id,
                quantity=quantity,
                invoice_price=invoice_price,
            )
        )

    batch_products = dict(
        StockBatch.objects.filter(pk__in={l.batch_id for l in lines}).values_list("pk", "product_id")
    )
    for line in lines:
        if line.batch_id not in batch_products:
            raise NotFoundError(f"Batch {line.batch_id} not found")
        if batch_products[line.batch_id] != line.product_id:
            raise ValidationError(
                f"Batch {line.batch_id} does not belong to product {line.product_id}"
            )

    return lines


# ============================================================
# PROCESSING
# ============================================================

def _process(return_type: str, on_date, items, user) -> ReturnSummary:
    if not isinstance(on_date, date):
        raise ValidationError({"date": "a return / damage date is required"})

    lines = _validate_lines(items)
    is_grm = return_type == Return.TYPE_GRM
    rtd = grm_rtd() if is_grm else Decimal("0.00")

    created = []
    total_loss = Decimal("0.00")

    try:
        with transaction.atomic():
            for line in lines:
                available = batch_availability(line.batch_id, lock=True).available_quantity
                if available < line.quantity:
                    raise InsufficientStockError(
                        f"Insufficient stock for batch {line.batch_id}. Available: {available}",
                        product_id=line.product_id,
                        batch_id=line.batch_id,
                        requested=line.quantity,
                        available=available,
                    )

                loss = grm_loss(line.quantity, line.invoice_price) if is_grm else Decimal("0.00")
                row = Return.objects.create(
                    return_date=on_date,
                    type=return_type,
                    product_id=line.product_id,
                    batch_id=line.batch_id,
                    quantity=line.quantity,
                    invoice_price=line.invoice_price,
                    loss_amount=loss,
                    rtd=rtd,
                    staff=user if getattr(user, "is_authenticated", False) else None,
                )
                created.append(row)
                total_loss += loss
    except InsufficientStockError as exc:
        logger.warning(
            "%s processing rolled back: insufficient stock",
            return_type,
            extra={
                "date": str(on_date),
                "batch_id": exc.batch_id,
                "requested": exc.requested,
                "available": exc.available,
            },
        )
        raise

    summary = ReturnSummary(
        total_items=len(created),
        total_quantity=sum(r.quantity for r in created),
        total_loss=_money(total_loss),
        return_ids=tuple(r.pk for r in created),
    )
    logger.info(
        "%s processed",
        return_type,
        extra={
            "date": str(on_date),
            "total_items": summary.total_items,
            "total_quantity": summary.total_quantity,
            "total_loss": str(summary.total_loss),
        },
    )
    return summary


def process_grm_return(*, return_date: date, items, user=None) -> ReturnSummary:
    """
    Record expiry returns. items: [{product_id, batch_id, quantity, invoice_price}]
    """
    return _process(Return.TYPE_GRM, return_date, items, user)


def process_gvn_damage(*, damage_date: date, items, user=None) -> ReturnSummary:
    """
    Record inbound damage write-offs. items: [{product_id, batch_id, quantity, invoice_price}]
    """
    return _process(Return.TYPE_GVN, damage_date, items, user)


# ============================================================
# PENDING (awaiting credit)
# ============================================================

def pending_returns(month: str) -> dict[str, list[PendingReturnGroup]]:
    """
    Pending returns of a YYYY-MM month, grouped by (product, return_date) per type,
    newest first.
    """
    if not MONTH_RE.match(month or ""):
        raise ValidationError({"month": "Invalid month format. Use YYYY-MM format"})

    year, mon = (int(p) for p in month.split("-"))
    rows = (
        Return.objects.filter(
            credit_status=Return.CREDIT_PENDING,
            return_date__year=year,
            return_date__month=mon,
        )
        .select_related("product")
        .order_by("-return_date", "-id")
    )

    grouped: dict[str, OrderedDict] = {Return.TYPE_GRM: OrderedDict(), Return.TYPE_GVN: OrderedDict()}
    for row in rows:
        key = (row.product_id, row.return_date)
        group = grouped[row.type].get(key)
        if group is None:
            group = PendingReturnGroup(
                return_type=row.type,
                product=row.product,
                return_date=row.return_date,
            )
            grouped[row.type][key] = group
        group.quantity += row.quantity
        group.loss_amount += row.loss_amount
        group.return_ids.append(row.pk)

    return {kind: list(groups.values()) for kind, groups in grouped.items()}
