# products/tests/test_stock_api.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, StockBatch

User = get_user_model()


class StockApiTests(TestCase):
    """
    Stock + catalog endpoint tests.

    GUARANTEES:
    - Anonymous users are rejected
    - Lot listing follows FEFO and the reference date
    - Shelf-life changes go through the catalog action
    """

    def setUp(self):
        self.user = User.objects.create_user(username="counter_staff", password="password123")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.cake = Product.objects.create(
            item_code="OG1001",
            name="Black Forest Slice",
            shelf_life_days=3,
            invoice_price=Decimal("12.00"),
        )
        self.older = StockBatch.objects.create(
            product=self.cake, quantity_received=10, invoice_date=date(2025, 1, 1)
        )
        self.newer = StockBatch.objects.create(
            product=self.cake, quantity_received=5, invoice_date=date(2025, 1, 3)
        )

    def test_anonymous_user_is_rejected(self):
        response = APIClient().get("/api/products/stock/available/")
        self.assertEqual(response.status_code, 401)

    def test_available_lots_in_fefo_order(self):
        response = self.client.get("/api/products/stock/available/", {"date": "2025-01-02"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["batch_id"] for row in response.data], [self.older.pk, self.newer.pk])
        self.assertEqual(response.data[0]["expiry_date"], "2025-01-04")
        self.assertEqual(response.data[0]["available_quantity"], 10)

    def test_expired_flag_lists_expired_lots(self):
        response = self.client.get(
            "/api/products/stock/available/",
            {"date": "2025-01-04", "expired": "true"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["batch_id"] for row in response.data], [self.older.pk])

    def test_unknown_product_filter_is_404(self):
        response = self.client.get("/api/products/stock/available/", {"product_id": 999999})
        self.assertEqual(response.status_code, 404)

    def test_aggregated_stock(self):
        response = self.client.get("/api/products/stock/aggregated/", {"date": "2025-01-02"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["total_available"], 15)

    def test_shelf_life_action_updates_policy(self):
        response = self.client.post(
            f"/api/products/catalog/{self.cake.pk}/shelf-life/",
            {"shelf_life_days": 7},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.cake.refresh_from_db()
        self.assertEqual(self.cake.shelf_life_days, 7)
