# purchases/services/receiving_service.py


"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
PURCHASE RECEIVING SERVICE

Receive a parsed supplier invoice atomically:

Canonical flow:
1) Validate the parsed document (nothing written on bad input)
2) Reject a duplicate invoice number (ConflictError)
3) Create Invoice + InvoiceItems
4) Upsert catalog products from the lines (pricing + shelf-life inference)
5) Create ONE StockBatch per line (invoice_date, invoice_reference = number)

Any failure rolls back every row of the invoice.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from products.models import StockBatch
from products.services.catalog import upsert_product_from_invoice_line
from products.services.exceptions import ConflictError
from purchases.documents import ParsedInvoice
from purchases.models import Invoice, InvoiceItem

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _validate(parsed: ParsedInvoice) -> None:
    if not (parsed.invoice_number or "").strip():
        raise ValidationError({"invoice_number": "invoice_number is required"})
    if parsed.invoice_date is None:
        raise ValidationError({"invoice_date": "invoice_date is required"})
    if not parsed.lines:
        raise ValidationError({"lines": "invoice has no items"})

    for i, line in enumerate(parsed.lines):
        if not (line.item_code or "").strip():
            raise ValidationError(f"lines[{i}]: item_code is required")
        if int(line.quantity or 0) <= 0:
            raise ValidationError(f"lines[{i}]: quantity must be greater than zero")
        if _money(line.rate) < Decimal("0.00"):
            raise ValidationError(f"lines[{i}]: rate cannot be negative")


def receive_invoice(parsed: ParsedInvoice, *, source_file: str = "", user=None) -> Invoice:
    """
    RECEIVE SUPPLIER INVOICE (atomic)

    Raises:
    - ValidationError  malformed parsed document
    - ConflictError    invoice number already received
    """
    _validate(parsed)
    number = parsed.invoice_number.strip()

    if Invoice.objects.filter(invoice_number=number).exists():
        raise ConflictError(f"Invoice already uploaded with invoice number {number}")

    try:
        with transaction.atomic():
            invoice = Invoice.objects.create(
                invoice_number=number,
                invoice_date=parsed.invoice_date,
                store_name=parsed.store_name or "",
                customer_name=parsed.customer_name or parsed.store_name or "",
                total_amount=_money(parsed.total_amount),
                source_file=source_file or "",
                received_by=user if getattr(user, "is_authenticated", False) else None,
            )

            for line in parsed.lines:
                product = upsert_product_from_invoice_line(
                    item_code=line.item_code,
                    item_name=line.item_name,
                    hsn_code=line.hsn_code,
                    rate=line.rate,
                )

                InvoiceItem.objects.create(
                    invoice=invoice,
                    sl_no=line.sl_no or 0,
                    item_code=line.item_code.strip(),
                    item_name=line.item_name or product.name,
                    hsn_code=line.hsn_code or "",
                    quantity=int(line.quantity),
                    uom=line.uom or "",
                    rate=_money(line.rate),
                    total=_money(
                        line.total if line.total is not None else Decimal(int(line.quantity)) * _money(line.rate)
                    ),
                )

                StockBatch.objects.create(
                    product=product,
                    quantity_received=int(line.quantity),
                    invoice_date=parsed.invoice_date,
                    invoice_reference=number,
                )
    except IntegrityError as exc:
        # Concurrent upload of the same invoice number.
        raise ConflictError(f"Invoice already uploaded with invoice number {number}") from exc

    logger.info(
        "Invoice received",
        extra={
            "invoice_id": invoice.pk,
            "invoice_number": number,
            "lines": len(parsed.lines),
            "source_file": source_file,
        },
    )
    return invoice


def invoices_for_month(year: int, month: int):
    return (
        Invoice.objects.filter(invoice_date__year=year, invoice_date__month=month)
        .prefetch_related("items")
        .order_by("-invoice_date", "-id")
    )
