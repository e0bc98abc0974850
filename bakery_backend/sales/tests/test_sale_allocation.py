# sales/tests/test_sale_allocation.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Decoration, Product, StockBatch
from products.services.exceptions import (
    InsufficientStockError,
    InsufficientUnexpiredStockError,
    NotFoundError,
)
from products.services.ledger import batch_availability
from sales.models import Sale, SaleItem
from sales.services.sale_service import record_sale

User = get_user_model()

SALE_DATE = date(2025, 1, 2)


class SaleAllocationTests(TestCase):
    """
    Sale allocator tests.

    GUARANTEES:
    - FEFO split across lots, never partial
    - Pinned lots must be unexpired and sufficient
    - One failing line rolls back the whole sale
    - Decoration counters never go negative
    """

    def setUp(self):
        self.user = User.objects.create_user(username="cashier", password="password123")

        self.cake = Product.objects.create(
            item_code="OG1001",
            name="Black Forest Slice",
            shelf_life_days=3,
            invoice_price=Decimal("12.00"),
            sale_price=Decimal("20.00"),
        )
        self.bread = Product.objects.create(
            item_code="OB1001",
            name="Milk Bread",
            shelf_life_days=3,
            invoice_price=Decimal("30.00"),
            sale_price=Decimal("40.00"),
        )

        # Expires 2025-01-04, then 2025-01-06.
        self.older = StockBatch.objects.create(product=self.cake, quantity_received=5, invoice_date=date(2025, 1, 1))
        self.newer = StockBatch.objects.create(product=self.cake, quantity_received=10, invoice_date=date(2025, 1, 3))
        # Already expired on SALE_DATE.
        self.stale = StockBatch.objects.create(product=self.cake, quantity_received=7, invoice_date=date(2024, 12, 28))

        self.bread_lot = StockBatch.objects.create(product=self.bread, quantity_received=2, invoice_date=date(2025, 1, 2))

        self.candle = Decoration.objects.create(
            sku="DEC-CANDLE",
            name="Candle",
            stock_quantity=3,
            sale_price=Decimal("10.00"),
            cost_price=Decimal("4.00"),
        )

    def _line(self, product, quantity, **extra):
        return {"product_id": product.pk, "quantity": quantity, "unit_price": "20.00", **extra}

    # =====================================================
    # FEFO
    # =====================================================

    def test_fefo_splits_across_lots(self):
        sale = record_sale(
            sale_date=SALE_DATE,
            payment_type="cash",
            items=[self._line(self.cake, 8)],
            user=self.user,
        )

        items = list(sale.items.order_by("id"))
        self.assertEqual([(i.batch_id, i.quantity) for i in items], [(self.older.pk, 5), (self.newer.pk, 3)])
        self.assertEqual(batch_availability(self.older.pk).available_quantity, 0)
        self.assertEqual(batch_availability(self.newer.pk).available_quantity, 7)
        self.assertEqual(sale.total_amount, Decimal("160.00"))
        self.assertEqual(sale.total_cost, Decimal("96.00"))
        self.assertEqual(sale.staff, self.user)

    def test_expired_lots_are_never_allocated(self):
        with self.assertRaises(InsufficientUnexpiredStockError) as ctx:
            record_sale(sale_date=SALE_DATE, payment_type="cash", items=[self._line(self.cake, 16)])

        self.assertEqual(ctx.exception.available, 15)
        self.assertEqual(ctx.exception.requested, 16)
        self.assertEqual(batch_availability(self.stale.pk).available_quantity, 7)

    def test_same_product_twice_sees_earlier_line(self):
        sale = record_sale(
            sale_date=SALE_DATE,
            payment_type="upi",
            items=[self._line(self.cake, 4), self._line(self.cake, 4)],
        )

        allocated = [(i.batch_id, i.quantity) for i in sale.items.order_by("id")]
        self.assertEqual(allocated, [(self.older.pk, 4), (self.older.pk, 1), (self.newer.pk, 3)])

    # =====================================================
    # PINNED LOTS
    # =====================================================

    def test_pinned_lot_is_used(self):
        sale = record_sale(
            sale_date=SALE_DATE,
            payment_type="card",
            items=[self._line(self.cake, 2, batch_id=self.newer.pk)],
        )

        self.assertEqual([i.batch_id for i in sale.items.all()], [self.newer.pk])

    def test_pinned_expired_lot_is_rejected(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[self._line(self.cake, 1, batch_id=self.stale.pk)],
            )

        self.assertEqual(ctx.exception.batch_id, self.stale.pk)
        self.assertEqual(ctx.exception.available, 0)

    def test_pinned_lot_of_other_product_is_rejected(self):
        with self.assertRaises(InsufficientStockError):
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[self._line(self.cake, 1, batch_id=self.bread_lot.pk)],
            )

    def test_pinned_lot_short_reports_available(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[self._line(self.cake, 6, batch_id=self.older.pk)],
            )

        self.assertEqual(ctx.exception.available, 5)

    # =====================================================
    # ATOMICITY
    # =====================================================

    def test_failing_line_rolls_back_whole_sale(self):
        with self.assertRaises(InsufficientStockError):
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[
                    self._line(self.cake, 2),
                    self._line(self.bread, 3),
                    {"decoration_id": self.candle.pk, "quantity": 1, "unit_price": "10.00"},
                ],
            )

        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(SaleItem.objects.count(), 0)
        self.assertEqual(batch_availability(self.older.pk).available_quantity, 5)
        self.candle.refresh_from_db()
        self.assertEqual(self.candle.stock_quantity, 3)

    def test_decoration_counter_rolls_back_with_sale(self):
        with self.assertRaises(InsufficientStockError):
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[
                    {"decoration_id": self.candle.pk, "quantity": 2, "unit_price": "10.00"},
                    self._line(self.bread, 5),
                ],
            )

        self.candle.refresh_from_db()
        self.assertEqual(self.candle.stock_quantity, 3)

    # =====================================================
    # DECORATIONS
    # =====================================================

    def test_decoration_counter_is_depleted(self):
        sale = record_sale(
            sale_date=SALE_DATE,
            payment_type="cash",
            items=[{"decoration_id": self.candle.pk, "quantity": 2, "unit_price": "10.00"}],
        )

        self.candle.refresh_from_db()
        self.assertEqual(self.candle.stock_quantity, 1)
        item = sale.items.get()
        self.assertEqual(item.item_type, SaleItem.TYPE_DECORATION)
        self.assertIsNone(item.batch_id)
        self.assertEqual(sale.decoration_total, Decimal("20.00"))
        self.assertEqual(sale.total_cost, Decimal("8.00"))

    def test_decoration_counter_never_goes_negative(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[{"decoration_id": self.candle.pk, "quantity": 4, "unit_price": "10.00"}],
            )

        self.assertEqual(ctx.exception.available, 3)

    # =====================================================
    # VALIDATION (nothing written)
    # =====================================================

    def test_empty_items_rejected(self):
        with self.assertRaises(ValidationError):
            record_sale(sale_date=SALE_DATE, payment_type="cash", items=[])

    def test_unknown_payment_type_rejected(self):
        with self.assertRaises(ValidationError):
            record_sale(sale_date=SALE_DATE, payment_type="cheque", items=[self._line(self.cake, 1)])

    def test_line_needs_exactly_one_target(self):
        with self.assertRaises(ValidationError):
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[{"product_id": self.cake.pk, "decoration_id": self.candle.pk, "quantity": 1, "unit_price": "1.00"}],
            )

    def test_zero_price_rejected(self):
        with self.assertRaises(ValidationError):
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[{"product_id": self.cake.pk, "quantity": 1, "unit_price": "0"}],
            )

    def test_unknown_product_is_not_found(self):
        with self.assertRaises(NotFoundError):
            record_sale(
                sale_date=SALE_DATE,
                payment_type="cash",
                items=[{"product_id": 999999, "quantity": 1, "unit_price": "1.00"}],
            )

    def test_inactive_product_rejected(self):
        self.cake.deactivate()

        with self.assertRaises(ValidationError):
            record_sale(sale_date=SALE_DATE, payment_type="cash", items=[self._line(self.cake, 1)])

        self.assertEqual(Sale.objects.count(), 0)

    def test_sales_are_immutable(self):
        sale = record_sale(sale_date=SALE_DATE, payment_type="cash", items=[self._line(self.cake, 1)])

        with self.assertRaises(ValidationError):
            sale.save()
        with self.assertRaises(ValidationError):
            sale.items.first().delete()
