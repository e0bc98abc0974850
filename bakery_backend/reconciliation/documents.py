# reconciliation/documents.py

"""
PARSED SUPPLIER DOCUMENTS

Output of the (external) credit note / ROS receipt parsers.
A credit note PDF covering several return dates arrives already split:
one ParsedCreditNote per (number, return_date).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class ParsedCreditNoteItem:
    item_code: str
    quantity: int
    rtd: Decimal
    return_date: date
    item_name: str = ""

    def as_json(self) -> dict:
        # Stored shape of CreditNote.items entries.
        return {
            "itemCode": self.item_code,
            "itemName": self.item_name,
            "quantity": int(self.quantity),
            "rtd": str(self.rtd),
            "returnDate": self.return_date.isoformat(),
        }


@dataclass(frozen=True)
class ParsedCreditNote:
    credit_note_number: str
    date: date
    return_date: date
    items: list[ParsedCreditNoteItem] = field(default_factory=list)
    receiver_name: str = ""
    receiver_gstin: str = ""
    reason: str = ""
    gross_value: Decimal = Decimal("0.00")
    net_value: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class ParsedBill:
    """
    One settled document on a ROS receipt.

    doc_type:
    - "SR": supplier invoice (matched on Invoice.invoice_number)
    - "CN": credit note (matched on CreditNote.credit_note_number)
    """

    doc_type: str
    bill_number: str
    amount: Decimal
    bill_date: date | None = None

    def as_json(self) -> dict:
        return {
            "doc_type": self.doc_type,
            "bill_number": self.bill_number,
            "bill_date": self.bill_date.isoformat() if self.bill_date else None,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class ParsedRosReceipt:
    receipt_number: str
    receipt_date: date
    bills: list[ParsedBill] = field(default_factory=list)
    received_from: str = ""
    total_amount: Decimal = Decimal("0.00")
    payment_method: str = ""
