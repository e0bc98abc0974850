# sales/services/sale_service.py

"""
======================================================
PATH: sales/services/sale_service.py
======================================================
SALE ALLOCATOR (CORE SALES DOMAIN SERVICE)

SINGLE SOURCE OF TRUTH for:
- Sale creation
- SaleItem creation (= stock allocation rows)
- FEFO lot allocation / pinned lot validation
- Decoration counter depletion
- Totals calculation

Flow:
1) Validate + resolve the request (no transaction is opened on bad input)
2) ONE transaction.atomic() for the whole request
3) Per line: allocate via a DepletableResource, write one SaleItem per
   (lot, quantity) immediately, so later lines of the same product see it
4) Any failure rolls back the Sale, every SaleItem and every counter update

GUARANTEES:
- Never partial: a line is either fully allocated or the sale fails
- No batch row is ever mutated
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction

from products.models import Decoration, Product
from products.services.catalog import get_decoration, get_product
from products.services.exceptions import InsufficientStockError
from sales.models import Sale, SaleItem
from sales.services.depletion import BatchedStock, CounterStock, DepletableResource

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_int_qty(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if value is None or value == "":
        return 0

    if isinstance(value, bool):
        raise ValidationError("quantity must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise ValidationError("quantity must be a whole integer unit")


@dataclass(frozen=True)
class _SaleLine:
    resource: DepletableResource
    quantity: int
    unit_price: Decimal
    name: str
    product: Product | None = None
    decoration: Decoration | None = None

    @property
    def total(self) -> Decimal:
        return _money(self.unit_price * self.quantity)

    @property
    def cost(self) -> Decimal:
        if self.decoration is not None:
            return _money(Decimal(self.decoration.cost_price) * self.quantity)
        return _money(Decimal(self.product.invoice_price) * self.quantity)


# ============================================================
# VALIDATION (before any transaction)
# ============================================================

def _validate_line(index: int, item) -> _SaleLine:
    if not isinstance(item, dict):
        raise ValidationError(f"items[{index}] must be an object")

    product_id = item.get("product_id")
    decoration_id = item.get("decoration_id")
    if bool(product_id) == bool(decoration_id):
        raise ValidationError(
            f"items[{index}]: exactly one of product_id or decoration_id is required"
        )

    quantity = _to_int_qty(item.get("quantity"))
    if quantity <= 0:
        raise ValidationError(f"items[{index}]: quantity must be greater than zero")

    try:
        unit_price = _money(item.get("unit_price"))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"items[{index}]: unit_price must be a valid decimal") from exc
    if unit_price <= Decimal("0.00"):
        raise ValidationError(f"items[{index}]: unit_price must be greater than zero")

    if decoration_id:
        decoration = get_decoration(decoration_id)
        if not decoration.is_active:
            raise ValidationError(f"items[{index}]: decoration {decoration.name} is inactive")
        return _SaleLine(
            resource=CounterStock(decoration),
            quantity=quantity,
            unit_price=unit_price,
            name=(item.get("name") or decoration.name),
            decoration=decoration,
        )

    product = get_product(product_id)
    if not product.is_active:
        raise ValidationError(f"items[{index}]: product {product.name} is inactive")

    return _SaleLine(
        resource=BatchedStock(product, pinned_batch_id=item.get("batch_id") or None),
        quantity=quantity,
        unit_price=unit_price,
        name=(item.get("name") or product.name),
        product=product,
    )


def _validate_request(sale_date, payment_type, items) -> list[_SaleLine]:
    if not isinstance(sale_date, date):
        raise ValidationError({"sale_date": "sale_date must be a date"})

    valid_payment_types = {choice for choice, _ in Sale.PAYMENT_CHOICES}
    if payment_type not in valid_payment_types:
        raise ValidationError(
            {"payment_type": f"payment_type must be one of {sorted(valid_payment_types)}"}
        )

    if not items:
        raise ValidationError({"items": "at least one item is required"})

    return [_validate_line(i, item) for i, item in enumerate(items)]


# ============================================================
# RECORD SALE
# ============================================================

def record_sale(*, sale_date: date, payment_type: str, items, user=None) -> Sale:
    """
    Record a sale atomically.

    items: [{product_id | decoration_id, quantity, unit_price, batch_id?, name?}]

    Raises:
    - ValidationError                  bad request (nothing written)
    - NotFoundError                    unknown product / decoration
    - InsufficientStockError           pinned lot or decoration counter short
    - InsufficientUnexpiredStockError  FEFO walk short
    """
    lines = _validate_request(sale_date, payment_type, items)

    product_total = sum((l.total for l in lines if l.product is not None), Decimal("0.00"))
    decoration_total = sum((l.total for l in lines if l.decoration is not None), Decimal("0.00"))
    total_cost = sum((l.cost for l in lines), Decimal("0.00"))

    try:
        with transaction.atomic():
            sale = Sale.objects.create(
                sale_date=sale_date,
                payment_type=payment_type,
                product_total=product_total,
                decoration_total=decoration_total,
                total_amount=product_total + decoration_total,
                total_cost=total_cost,
                staff=user if getattr(user, "is_authenticated", False) else None,
            )

            for line in lines:
                for allocation in line.resource.allocate(line.quantity, reference_date=sale_date):
                    SaleItem.objects.create(
                        sale=sale,
                        item_type=(
                            SaleItem.TYPE_DECORATION
                            if line.decoration is not None
                            else SaleItem.TYPE_PRODUCT
                        ),
                        product=line.product,
                        decoration=line.decoration,
                        batch=allocation.batch,
                        quantity=allocation.quantity,
                        unit_price=line.unit_price,
                        name=line.name,
                    )
    except InsufficientStockError as exc:
        logger.warning(
            "Sale rolled back: insufficient stock",
            extra={
                "sale_date": str(sale_date),
                "product_id": exc.product_id,
                "batch_id": exc.batch_id,
                "requested": exc.requested,
                "available": exc.available,
            },
        )
        raise

    logger.info(
        "Sale recorded",
        extra={
            "sale_id": sale.pk,
            "sale_date": str(sale_date),
            "lines": len(lines),
            "total_amount": str(sale.total_amount),
        },
    )
    return sale
