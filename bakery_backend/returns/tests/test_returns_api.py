# returns/tests/test_returns_api.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, StockBatch
from returns.models import Return

User = get_user_model()


class ReturnsApiTests(TestCase):
    """
    Return endpoint tests.

    GUARANTEES:
    - GET lists candidates + processed rows for the date
    - POST is 201 on success, 409 on short stock
    """

    def setUp(self):
        self.user = User.objects.create_user(username="store_keeper", password="password123")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.cake = Product.objects.create(
            item_code="OG1001",
            name="Black Forest Slice",
            shelf_life_days=3,
            invoice_price=Decimal("12.00"),
        )
        self.lot = StockBatch.objects.create(product=self.cake, quantity_received=10, invoice_date=date(2025, 1, 1))

    def _payload(self, quantity):
        return {
            "date": "2025-01-04",
            "items": [
                {
                    "product_id": self.cake.pk,
                    "batch_id": self.lot.pk,
                    "quantity": quantity,
                    "invoice_price": "12.00",
                }
            ],
        }

    def test_grm_day_view(self):
        response = self.client.get("/api/returns/grm/", {"date": "2025-01-04"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["candidates"]), 1)
        self.assertEqual(response.data["candidates"][0]["available_quantity"], 10)
        self.assertEqual(response.data["processed"], [])

    def test_process_grm(self):
        response = self.client.post("/api/returns/grm/", self._payload(10), format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["total_loss"], "18.00")
        self.assertEqual(Return.objects.get().staff, self.user)

    def test_process_grm_short_stock_is_409(self):
        response = self.client.post("/api/returns/grm/", self._payload(11), format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["available"], 10)
        self.assertEqual(Return.objects.count(), 0)

    def test_pending_view(self):
        self.client.post("/api/returns/gvn/", {**self._payload(2), "date": "2025-01-01"}, format="json")

        response = self.client.get("/api/returns/pending/", {"month": "2025-01"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["grm"], [])
        self.assertEqual(response.data["gvn"][0]["quantity"], 2)

    def test_pending_view_bad_month_is_400(self):
        response = self.client.get("/api/returns/pending/", {"month": "January"})
        self.assertEqual(response.status_code, 400)
