# products/tests/test_ledger.py

from datetime import date
from decimal import Decimal

from django.conf import settings
from django.test import TestCase

from products.models import Product, StockBatch
from products.services.catalog import update_shelf_life
from products.services.exceptions import NotFoundError
from products.services.ledger import (
    aggregated_stock,
    available_batches,
    batch_availability,
    expired_batches,
)
from returns.models import Return


class StockLedgerTests(TestCase):
    """
    Derived availability tests.

    GUARANTEES:
    - available = received - sold - returned, never stored
    - FEFO order is (expiry, invoice_date, id)
    - Expiry follows the product's CURRENT shelf-life policy
    """

    def setUp(self):
        self.cake = Product.objects.create(
            item_code="OG1001",
            name="Black Forest Slice",
            category="cakes",
            shelf_life_days=3,
            invoice_price=Decimal("12.00"),
            sale_price=Decimal("20.00"),
            grm_value=Decimal("1.80"),
        )
        self.cookies = Product.objects.create(
            item_code="OZ2001",
            name="Butter Cookies",
            category="cookies",
            shelf_life_days=None,
            invoice_price=Decimal("40.00"),
        )

        self.older = StockBatch.objects.create(
            product=self.cake,
            quantity_received=10,
            invoice_date=date(2025, 1, 1),
            invoice_reference="INV-1",
        )
        self.newer = StockBatch.objects.create(
            product=self.cake,
            quantity_received=5,
            invoice_date=date(2025, 1, 3),
            invoice_reference="INV-2",
        )

    def _return(self, batch, quantity, kind=Return.TYPE_GVN):
        return Return.objects.create(
            return_date=batch.invoice_date,
            type=kind,
            product=batch.product,
            batch=batch,
            quantity=quantity,
            invoice_price=Decimal("12.00"),
        )

    # =====================================================
    # FEFO + DERIVED AVAILABILITY
    # =====================================================

    def test_fefo_orders_by_expiry(self):
        entries = available_batches(product=self.cake, reference_date=date(2025, 1, 2))

        self.assertEqual([e.batch.pk for e in entries], [self.older.pk, self.newer.pk])
        self.assertEqual(entries[0].expiry_date, date(2025, 1, 4))
        self.assertEqual(entries[1].expiry_date, date(2025, 1, 6))

    def test_same_expiry_falls_back_to_lot_id(self):
        twin = StockBatch.objects.create(
            product=self.cake,
            quantity_received=2,
            invoice_date=date(2025, 1, 1),
        )

        entries = available_batches(product=self.cake, reference_date=date(2025, 1, 2))

        self.assertEqual([e.batch.pk for e in entries], [self.older.pk, twin.pk, self.newer.pk])

    def test_allocations_reduce_availability(self):
        self._return(self.older, 4)

        entry = batch_availability(self.older.pk)

        self.assertEqual(entry.available_quantity, 6)
        self.older.refresh_from_db()
        self.assertEqual(self.older.quantity_received, 10)

    def test_fully_allocated_lot_is_not_listed(self):
        self._return(self.older, 10)

        entries = available_batches(product=self.cake, reference_date=date(2025, 1, 2))

        self.assertEqual([e.batch.pk for e in entries], [self.newer.pk])
        self.assertEqual(batch_availability(self.older.pk).available_quantity, 0)

    def test_missing_lot_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            batch_availability(999999)

    # =====================================================
    # EXPIRY
    # =====================================================

    def test_lot_expiring_on_reference_date_is_expired(self):
        on_expiry = date(2025, 1, 4)

        available = available_batches(product=self.cake, reference_date=on_expiry)
        expired = expired_batches(reference_date=on_expiry, product=self.cake)

        self.assertEqual([e.batch.pk for e in available], [self.newer.pk])
        self.assertEqual([e.batch.pk for e in expired], [self.older.pk])

    def test_include_expired_returns_every_lot_with_stock(self):
        entries = available_batches(
            product=self.cake,
            reference_date=date(2025, 2, 1),
            include_expired=True,
        )
        self.assertEqual(len(entries), 2)

    def test_shelf_life_change_reclassifies_existing_lots(self):
        on_date = date(2025, 1, 4)
        self.assertEqual(len(expired_batches(reference_date=on_date, product=self.cake)), 1)

        update_shelf_life(self.cake, 10)

        self.assertEqual(expired_batches(reference_date=on_date, product=self.cake), [])
        self.older.refresh_from_db()
        self.assertEqual(self.older.expiry_date, date(2025, 1, 11))

    def test_non_perishable_uses_sentinel_expiry(self):
        lot = StockBatch.objects.create(
            product=self.cookies,
            quantity_received=8,
            invoice_date=date(2025, 1, 1),
        )

        self.assertEqual(lot.expiry_date, settings.NON_PERISHABLE_EXPIRY)
        self.assertEqual(
            len(available_batches(product=self.cookies, reference_date=date(2030, 1, 1))),
            1,
        )

    def test_zero_shelf_life_is_non_perishable(self):
        self.cookies.shelf_life_days = 0
        self.cookies.save()

        self.assertFalse(self.cookies.is_perishable)
        self.assertEqual(self.cookies.expiry_for(date(2025, 1, 1)), settings.NON_PERISHABLE_EXPIRY)

    # =====================================================
    # AGGREGATES + VISIBILITY
    # =====================================================

    def test_aggregated_stock_sums_unexpired_lots(self):
        self._return(self.newer, 1)
        StockBatch.objects.create(product=self.cookies, quantity_received=8, invoice_date=date(2025, 1, 1))

        rows = aggregated_stock(reference_date=date(2025, 1, 2))

        self.assertEqual([r.product.pk for r in rows], [self.cake.pk, self.cookies.pk])
        self.assertEqual(rows[0].total_available, 14)
        self.assertEqual(rows[0].next_expiry, date(2025, 1, 4))
        self.assertEqual(rows[1].total_available, 8)

    def test_aggregated_stock_skips_expired_lots(self):
        rows = aggregated_stock(reference_date=date(2025, 1, 5))

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].total_available, 5)

    def test_inactive_product_lots_are_hidden(self):
        self.cake.deactivate()

        self.assertEqual(available_batches(product=self.cake, reference_date=date(2025, 1, 2)), [])
