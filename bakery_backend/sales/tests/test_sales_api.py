# sales/tests/test_sales_api.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, StockBatch
from sales.models import Sale

User = get_user_model()


class SalesApiTests(TestCase):
    """
    Sales endpoint tests.

    GUARANTEES:
    - 201 with server-computed totals
    - 409 with lot context on insufficient stock
    - 400 on malformed input, nothing written
    """

    def setUp(self):
        self.user = User.objects.create_user(username="cashier", password="password123")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.cake = Product.objects.create(
            item_code="OG1001",
            name="Black Forest Slice",
            shelf_life_days=3,
            invoice_price=Decimal("12.00"),
        )
        self.lot = StockBatch.objects.create(product=self.cake, quantity_received=5, invoice_date=date(2025, 1, 1))

    def _payload(self, quantity, **line):
        return {
            "sale_date": "2025-01-02",
            "payment_type": "cash",
            "items": [{"product_id": self.cake.pk, "quantity": quantity, "unit_price": "20.00", **line}],
        }

    def test_record_sale(self):
        response = self.client.post("/api/sales/", self._payload(2), format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["total_amount"], "40.00")
        self.assertEqual(response.data["staff"], "cashier")
        self.assertEqual(len(response.data["items"]), 1)

    def test_insufficient_stock_is_409(self):
        response = self.client.post("/api/sales/", self._payload(6), format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["requested"], 6)
        self.assertEqual(response.data["available"], 5)
        self.assertEqual(Sale.objects.count(), 0)

    def test_pinned_expired_lot_is_409(self):
        payload = self._payload(1, batch_id=self.lot.pk)
        payload["sale_date"] = "2025-01-04"

        response = self.client.post("/api/sales/", payload, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["batch_id"], self.lot.pk)

    def test_malformed_input_is_400(self):
        response = self.client.post(
            "/api/sales/",
            {"sale_date": "2025-01-02", "payment_type": "cash", "items": []},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_list_filters_by_date(self):
        self.client.post("/api/sales/", self._payload(1), format="json")

        response = self.client.get("/api/sales/", {"sale_date": "2025-01-02"})
        empty = self.client.get("/api/sales/", {"sale_date": "2025-01-03"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(len(empty.data), 0)
