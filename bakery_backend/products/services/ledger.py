# products/services/ledger.py

"""
======================================================
PATH: products/services/ledger.py
======================================================
STOCK BATCH LEDGER (DERIVED AVAILABILITY)

Single source of truth for "how much of lot X is left":

    available(batch) = quantity_received
                       - Σ sale_items.quantity (batch)
                       - Σ returns.quantity    (batch)

GUARANTEES:
- No stored remaining quantity anywhere; batch rows are never mutated.
- Readers and writers use the SAME annotated query.
- Effective expiry is computed from the product's CURRENT shelf-life policy.
- FEFO order key: (expiry_date ASC, invoice_date ASC, batch.id ASC).
- Only lots with available > 0 of ACTIVE products are returned.

LOCKING:
- Writers pass lock=True inside their transaction.atomic() block.
- Locking happens in a separate statement BEFORE the sums are read, so a writer
  that waited on the lock re-reads the allocations committed by the previous
  holder (READ COMMITTED takes a fresh snapshot per statement).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from django.db.models import F, IntegerField, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from products.models import Product, StockBatch
from products.services.exceptions import NotFoundError
from returns.models import Return
from sales.models import SaleItem


@dataclass(frozen=True)
class BatchAvailability:
    batch: StockBatch
    available_quantity: int
    expiry_date: date

    @property
    def product(self) -> Product:
        return self.batch.product


@dataclass(frozen=True)
class ProductStock:
    product: Product
    total_available: int
    next_expiry: date | None


# ============================================================
# QUERY BUILDING
# ============================================================

def _allocated(model):
    """Σ quantity allocated to the outer batch by `model` rows (0 when none)."""
    totals = (
        model.objects.filter(batch=OuterRef("pk"))
        .order_by()
        .values("batch")
        .annotate(total=Sum("quantity"))
        .values("total")[:1]
    )
    return Coalesce(Subquery(totals, output_field=IntegerField()), Value(0))


def annotate_available(qs):
    return qs.annotate(
        sold_quantity=_allocated(SaleItem),
        returned_quantity=_allocated(Return),
    ).annotate(
        available_quantity=F("quantity_received") - F("sold_quantity") - F("returned_quantity"),
    )


def _base_queryset(*, product=None, lock: bool = False):
    qs = StockBatch.objects.filter(product__is_active=True)
    if product is not None:
        qs = qs.filter(product=product)

    if lock:
        # Lock first; sums are read by the next statement.
        list(qs.select_for_update(of=("self",)).order_by("pk").values_list("pk", flat=True))

    return annotate_available(qs.select_related("product")).filter(available_quantity__gt=0)


def _fefo_key(entry: BatchAvailability):
    return (entry.expiry_date, entry.batch.invoice_date, entry.batch.pk)


def _to_entries(qs) -> list[BatchAvailability]:
    return [
        BatchAvailability(
            batch=batch,
            available_quantity=int(batch.available_quantity),
            expiry_date=batch.expiry_date,
        )
        for batch in qs
    ]


# ============================================================
# READS
# ============================================================

def available_batches(
    product=None,
    reference_date: date | None = None,
    include_expired: bool = False,
    lock: bool = False,
) -> list[BatchAvailability]:
    """
    Lots with stock, in FEFO order.

    - include_expired=False: only lots whose expiry_date > reference_date
    - lock=True: row-lock the product's lots (call inside transaction.atomic())
    """
    reference_date = reference_date or timezone.localdate()
    entries = _to_entries(_base_queryset(product=product, lock=lock))

    if not include_expired:
        entries = [e for e in entries if e.expiry_date > reference_date]

    return sorted(entries, key=_fefo_key)


def expired_batches(reference_date: date | None = None, product=None) -> list[BatchAvailability]:
    """Lots whose expiry_date <= reference_date that still hold stock."""
    reference_date = reference_date or timezone.localdate()
    entries = _to_entries(_base_queryset(product=product))
    return sorted(
        (e for e in entries if e.expiry_date <= reference_date),
        key=_fefo_key,
    )


def batch_availability(batch_id, lock: bool = False) -> BatchAvailability:
    """
    Availability of ONE lot, regardless of expiry or product status.

    Returns available_quantity=0 for fully allocated lots.
    """
    qs = StockBatch.objects.filter(pk=batch_id)
    if lock:
        qs = qs.select_for_update(of=("self",))
        list(qs.values_list("pk", flat=True))

    try:
        batch = annotate_available(
            StockBatch.objects.filter(pk=batch_id).select_related("product")
        ).get()
    except (StockBatch.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Batch {batch_id} not found") from exc

    return BatchAvailability(
        batch=batch,
        available_quantity=max(int(batch.available_quantity), 0),
        expiry_date=batch.expiry_date,
    )


def aggregated_stock(reference_date: date | None = None) -> list[ProductStock]:
    """
    Unexpired available stock summed per product, ordered by product name.

    next_expiry is the nearest expiry among the product's lots with stock.
    """
    totals: dict[int, list] = {}
    for entry in available_batches(reference_date=reference_date):
        product = entry.batch.product
        row = totals.setdefault(product.pk, [product, 0, None])
        row[1] += entry.available_quantity
        if row[2] is None or entry.expiry_date < row[2]:
            row[2] = entry.expiry_date

    rows = [
        ProductStock(product=p, total_available=total, next_expiry=nearest)
        for p, total, nearest in totals.values()
    ]
    return sorted(rows, key=lambda r: (r.product.name, r.product.pk))
