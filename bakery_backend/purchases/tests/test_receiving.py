# purchases/tests/test_receiving.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, StockBatch
from products.services.exceptions import ConflictError
from purchases.documents import ParsedInvoice, ParsedInvoiceLine
from purchases.models import Invoice, InvoiceItem
from purchases.services.receiving_service import receive_invoice

User = get_user_model()


def _invoice(number="INV-100", lines=None):
    return ParsedInvoice(
        invoice_number=number,
        invoice_date=date(2025, 1, 1),
        total_amount=Decimal("500.00"),
        store_name="Bakery Outlet 1",
        lines=lines
        or [
            ParsedInvoiceLine(item_code="OG1001", item_name="Black Forest Slice", quantity=10, rate=Decimal("12.00"), sl_no=1),
            ParsedInvoiceLine(item_code="OZ2001", item_name="Butter Cookies", quantity=5, rate=Decimal("40.00"), sl_no=2),
        ],
    )


class InvoiceReceivingTests(TestCase):
    """
    Supplier invoice intake tests.

    GUARANTEES:
    - One StockBatch per line, dated with the invoice
    - Products are created / repriced from the lines
    - Duplicate invoice numbers are rejected
    """

    def setUp(self):
        self.user = User.objects.create_user(username="receiver", password="password123")

    def test_receive_creates_lots_and_products(self):
        invoice = receive_invoice(_invoice(), source_file="inv-100.pdf", user=self.user)

        self.assertEqual(invoice.items.count(), 2)
        self.assertEqual(invoice.received_by, self.user)

        lots = StockBatch.objects.filter(invoice_reference="INV-100").order_by("id")
        self.assertEqual([(l.product.item_code, l.quantity_received) for l in lots], [("OG1001", 10), ("OZ2001", 5)])
        self.assertTrue(all(l.invoice_date == date(2025, 1, 1) for l in lots))

        cake = Product.objects.get(item_code="OG1001")
        self.assertEqual(cake.shelf_life_days, 3)
        self.assertEqual(cake.sale_price, Decimal("20.00"))

    def test_line_total_defaults_to_quantity_times_rate(self):
        receive_invoice(_invoice())

        line = InvoiceItem.objects.get(item_code="OG1001")
        self.assertEqual(line.total, Decimal("120.00"))

    def test_duplicate_invoice_number_is_conflict(self):
        receive_invoice(_invoice())

        with self.assertRaises(ConflictError):
            receive_invoice(_invoice())

        self.assertEqual(Invoice.objects.count(), 1)
        self.assertEqual(StockBatch.objects.count(), 2)

    def test_bad_line_writes_nothing(self):
        lines = [
            ParsedInvoiceLine(item_code="OG1001", item_name="Cake", quantity=10, rate=Decimal("12.00")),
            ParsedInvoiceLine(item_code="OB1001", item_name="Bread", quantity=0, rate=Decimal("30.00")),
        ]

        with self.assertRaises(ValidationError):
            receive_invoice(_invoice(lines=lines))

        self.assertEqual(Invoice.objects.count(), 0)
        self.assertEqual(Product.objects.count(), 0)


class InvoiceApiTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="receiver", password="password123")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.payload = {
            "invoice_number": "INV-200",
            "invoice_date": "2025-01-10",
            "total_amount": "120.00",
            "source_file": "inv-200.pdf",
            "lines": [
                {"sl_no": 1, "item_code": "OG1001", "item_name": "Black Forest Slice", "quantity": 10, "rate": "12.00"},
            ],
        }

    def test_post_and_list_by_month(self):
        created = self.client.post("/api/purchases/invoices/", self.payload, format="json")

        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.data["source_file"], "inv-200.pdf")
        self.assertEqual(len(created.data["items"]), 1)

        listed = self.client.get("/api/purchases/invoices/", {"month": "2025-01"})
        self.assertEqual([row["invoice_number"] for row in listed.data], ["INV-200"])

        other_month = self.client.get("/api/purchases/invoices/", {"month": "2025-02"})
        self.assertEqual(other_month.data, [])

    def test_duplicate_post_is_409(self):
        self.client.post("/api/purchases/invoices/", self.payload, format="json")
        response = self.client.post("/api/purchases/invoices/", self.payload, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertIn("INV-200", response.data["detail"])
