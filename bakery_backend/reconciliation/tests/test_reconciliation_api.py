# reconciliation/tests/test_reconciliation_api.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, StockBatch
from purchases.models import Invoice
from reconciliation.models import CreditNote, RosReceiptClearedItem
from returns.models import Return
from returns.services.return_service import process_grm_return

User = get_user_model()


class ReconciliationApiTests(TestCase):
    """
    Reconciliation endpoint tests.

    GUARANTEES:
    - Credit note upload reconciles and reports per-note warnings
    - Explicit reconcile requests use the same policy
    - ROS receipt reprocessing answers 200 without new cleared items
    """

    def setUp(self):
        self.user = User.objects.create_user(username="accounts", password="password123")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        cake = Product.objects.create(
            item_code="OG1001",
            name="Black Forest Slice",
            shelf_life_days=3,
            invoice_price=Decimal("12.00"),
        )
        lot = StockBatch.objects.create(product=cake, quantity_received=20, invoice_date=date(2025, 1, 1))
        summary = process_grm_return(
            return_date=date(2025, 1, 4),
            items=[{"product_id": cake.pk, "batch_id": lot.pk, "quantity": 10, "invoice_price": "12.00"}],
        )
        self.entry = Return.objects.get(pk=summary.return_ids[0])

        self.upload = {
            "source_file": "cn-1.pdf",
            "notes": [
                {
                    "credit_note_number": "CN-1",
                    "date": "2025-01-20",
                    "return_date": "2025-01-04",
                    "items": [
                        {"item_code": "OG1001", "quantity": 10, "rtd": "15.00", "return_date": "2025-01-04"},
                    ],
                }
            ],
        }

    def test_upload_credit_note(self):
        response = self.client.post("/api/reconciliation/credit-notes/", self.upload, format="json")

        self.assertEqual(response.status_code, 201)
        stored = response.data["stored"][0]
        self.assertEqual(stored["reconciliation"]["received_ids"], [self.entry.pk])
        self.assertEqual(stored["credit_note"]["items"][0]["item_code"], "OG1001")
        self.assertEqual(response.data["reconciliation"]["received_ids"], [self.entry.pk])

        self.entry.refresh_from_db()
        self.assertEqual(self.entry.credit_status, Return.CREDIT_RECEIVED)

    def test_duplicate_upload_reports_warning(self):
        self.client.post("/api/reconciliation/credit-notes/", self.upload, format="json")
        response = self.client.post("/api/reconciliation/credit-notes/", self.upload, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["stored"], [])
        self.assertIsNone(response.data["reconciliation"])
        self.assertEqual(len(response.data["warnings"]), 1)

    def test_list_credit_notes_requires_month(self):
        self.assertEqual(self.client.get("/api/reconciliation/credit-notes/").status_code, 400)

        self.client.post("/api/reconciliation/credit-notes/", self.upload, format="json")
        response = self.client.get("/api/reconciliation/credit-notes/", {"month": "2025-01"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

    def test_reconcile_explicit_lines_mismatch(self):
        response = self.client.post(
            "/api/reconciliation/credit-notes/reconcile/",
            {"items": [{"item_code": "OG1001", "quantity": 9, "rtd": "15.00", "return_date": "2025-01-04"}]},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["alerted_ids"], [self.entry.pk])
        self.assertEqual(response.data["mismatches"][0]["credited_quantity"], 9)
        self.assertEqual(response.data["matches"][0]["outcome"], "quantity_mismatch")

    def test_reconcile_stored_note(self):
        note = CreditNote.objects.create(
            credit_note_number="CN-5",
            date=date(2025, 1, 20),
            return_date=date(2025, 1, 4),
            items=[{"itemCode": "OG1001", "quantity": 10, "rtd": "15.00", "returnDate": "2025-01-04"}],
        )

        response = self.client.post(
            "/api/reconciliation/credit-notes/reconcile/",
            {"credit_note_id": note.pk},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["credit_note_number"], "CN-5")
        self.assertEqual(response.data["received_ids"], [self.entry.pk])

    def test_reconcile_unknown_note_is_404(self):
        response = self.client.post(
            "/api/reconciliation/credit-notes/reconcile/",
            {"credit_note_id": 999999},
            format="json",
        )
        self.assertEqual(response.status_code, 404)

    def test_reconcile_needs_exactly_one_source(self):
        response = self.client.post("/api/reconciliation/credit-notes/reconcile/", {}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_ros_receipt_is_idempotent(self):
        Invoice.objects.create(invoice_number="INV-100", invoice_date=date(2025, 1, 10), total_amount=Decimal("500.00"))
        payload = {
            "receipt_number": "ROS-1",
            "receipt_date": "2025-01-25",
            "total_amount": "500.00",
            "bills": [{"doc_type": "SR", "bill_number": "INV-100", "amount": "500.00"}],
        }

        first = self.client.post("/api/reconciliation/ros-receipts/", payload, format="json")
        second = self.client.post("/api/reconciliation/ros-receipts/", payload, format="json")

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(len(second.data["cleared_items"]), 1)
        self.assertEqual(RosReceiptClearedItem.objects.count(), 1)

        listed = self.client.get("/api/reconciliation/ros-receipts/", {"month": "2025-01"})
        self.assertEqual(len(listed.data), 1)

    def test_missing_documents_view(self):
        self.client.post(
            "/api/reconciliation/ros-receipts/",
            {
                "receipt_number": "ROS-2",
                "receipt_date": "2025-01-25",
                "bills": [
                    {"doc_type": "SR", "bill_number": "INV-404", "amount": "80.00"},
                    {"doc_type": "CN", "bill_number": "CN-404", "amount": "9.00"},
                ],
            },
            format="json",
        )

        response = self.client.get("/api/reconciliation/ros-receipts/missing/", {"month": "2025-01"})
        cn_only = self.client.get("/api/reconciliation/credit-notes/missing/", {"month": "2025-01"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([m["bill_number"] for m in response.data["invoices"]], ["INV-404"])
        self.assertEqual([m["bill_number"] for m in response.data["credit_notes"]], ["CN-404"])
        self.assertEqual([m["bill_number"] for m in cn_only.data], ["CN-404"])
