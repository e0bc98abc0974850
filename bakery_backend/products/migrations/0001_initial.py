"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Product, Decoration, StockBatch

Purpose:
- Catalog with shelf-life policy (expiry is computed, never stored)
- Decoration counter stock (non-negative check)
- Immutable StockBatch lots (no stored remaining quantity)
"""

from __future__ import annotations

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_code", models.CharField(db_index=True, max_length=64, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("category", models.CharField(blank=True, default="", max_length=64)),
                ("hsn_code", models.CharField(blank=True, default="", max_length=32)),
                ("shelf_life_days", models.PositiveIntegerField(blank=True, null=True)),
                ("invoice_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("sale_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("grm_value", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["is_active", "name"], name="product_active_name_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Decoration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sku", models.CharField(db_index=True, max_length=64, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("category", models.CharField(blank=True, default="", max_length=64)),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                ("sale_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("cost_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(stock_quantity__gte=0),
                        name="chk_decoration_stock_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockBatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity_received", models.PositiveIntegerField(help_text="Quantity delivered (immutable)")),
                ("invoice_date", models.DateField(db_index=True)),
                (
                    "invoice_reference",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Supplier invoice number this lot came from",
                        max_length=64,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_batches",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["invoice_date", "id"],
                "indexes": [
                    models.Index(fields=["product", "invoice_date"], name="stockbatch_product_date_idx"),
                    models.Index(fields=["invoice_reference"], name="stockbatch_invoice_ref_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity_received__gt=0),
                        name="chk_stockbatch_qty_received_gt_zero",
                    ),
                ],
            },
        ),
    ]
