# purchases/documents.py

"""
PARSED INVOICE DOCUMENT

Output of the (external) supplier invoice parser. The engine never reads PDFs;
it only consumes these values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class ParsedInvoiceLine:
    item_code: str
    item_name: str
    quantity: int
    rate: Decimal
    sl_no: int = 0
    hsn_code: str = ""
    uom: str = ""
    total: Decimal | None = None


@dataclass(frozen=True)
class ParsedInvoice:
    invoice_number: str
    invoice_date: date
    total_amount: Decimal
    lines: list[ParsedInvoiceLine] = field(default_factory=list)
    store_name: str = ""
    customer_name: str = ""
