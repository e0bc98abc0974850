# sales/services/depletion.py

"""
======================================================
PATH: sales/services/depletion.py
======================================================
DEPLETABLE RESOURCES

Two kinds of stock leave the shop through a sale:

- BatchedStock: perishable products held in StockBatch lots.
    Allocation is a list of (lot, quantity) pairs, FEFO order, or one pinned lot.
    Nothing is written here; the caller records one SaleItem per pair, which
    IS the depletion (availability is derived).

- CounterStock: decorations with a single stock counter.
    Allocation is one conditional UPDATE (stock_quantity >= qty), so the
    counter can never go negative.

Both MUST be called inside the caller's transaction.atomic() block.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date

from django.db.models import F

from products.models import Decoration, Product, StockBatch
from products.services.exceptions import (
    InsufficientStockError,
    InsufficientUnexpiredStockError,
    NotFoundError,
)
from products.services.ledger import available_batches, batch_availability


@dataclass(frozen=True)
class Allocation:
    quantity: int
    batch: StockBatch | None = None


class DepletableResource(ABC):
    @abstractmethod
    def allocate(self, quantity: int, *, reference_date: date) -> list[Allocation]:
        """Reserve `quantity` units or raise InsufficientStockError. Never partial."""


class BatchedStock(DepletableResource):
    def __init__(self, product: Product, *, pinned_batch_id=None):
        self.product = product
        self.pinned_batch_id = pinned_batch_id

    def allocate(self, quantity: int, *, reference_date: date) -> list[Allocation]:
        if self.pinned_batch_id is not None:
            return self._allocate_pinned(quantity, reference_date)
        return self._allocate_fefo(quantity, reference_date)

    def _allocate_pinned(self, quantity: int, reference_date: date) -> list[Allocation]:
        try:
            entry = batch_availability(self.pinned_batch_id, lock=True)
        except NotFoundError:
            entry = None

        available = entry.available_quantity if entry is not None else 0
        usable = (
            entry is not None
            and entry.batch.product_id == self.product.pk
            and entry.expiry_date > reference_date
        )

        if not usable or available < quantity:
            raise InsufficientStockError(
                f"Insufficient stock for product {self.product.name} in selected batch "
                f"{self.pinned_batch_id}. Available: {available if usable else 0}, "
                f"Requested: {quantity}",
                product_id=self.product.pk,
                batch_id=self.pinned_batch_id,
                requested=quantity,
                available=available if usable else 0,
            )

        return [Allocation(quantity=quantity, batch=entry.batch)]

    def _allocate_fefo(self, quantity: int, reference_date: date) -> list[Allocation]:
        entries = available_batches(product=self.product, reference_date=reference_date, lock=True)

        total_available = sum(e.available_quantity for e in entries)
        if total_available < quantity:
            raise InsufficientUnexpiredStockError(
                f"Insufficient unexpired stock for product {self.product.name}. "
                f"Requested: {quantity}, Available: {total_available}",
                product_id=self.product.pk,
                requested=quantity,
                available=total_available,
            )

        remaining = quantity
        allocations = []
        for entry in entries:
            if remaining <= 0:
                break
            used = min(entry.available_quantity, remaining)
            allocations.append(Allocation(quantity=used, batch=entry.batch))
            remaining -= used

        return allocations


class CounterStock(DepletableResource):
    def __init__(self, decoration: Decoration):
        self.decoration = decoration

    def allocate(self, quantity: int, *, reference_date: date) -> list[Allocation]:
        updated = Decoration.objects.filter(
            pk=self.decoration.pk,
            is_active=True,
            stock_quantity__gte=quantity,
        ).update(stock_quantity=F("stock_quantity") - quantity)

        if not updated:
            available = (
                Decoration.objects.filter(pk=self.decoration.pk, is_active=True)
                .values_list("stock_quantity", flat=True)
                .first()
            ) or 0
            raise InsufficientStockError(
                f"Insufficient stock for decoration {self.decoration.name}. "
                f"Available: {available}, Requested: {quantity}",
                requested=quantity,
                available=available,
            )

        return [Allocation(quantity=quantity)]
