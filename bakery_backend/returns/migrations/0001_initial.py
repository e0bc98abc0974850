"""
======================================================
PATH: returns/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Return

Purpose:
- GRM / GVN allocation rows against StockBatch lots
- credit_status lifecycle written by reconciliation
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Return",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("return_date", models.DateField(db_index=True)),
                (
                    "type",
                    models.CharField(
                        choices=[("GRM", "GRM (expiry return)"), ("GVN", "GVN (damage)")],
                        max_length=8,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                (
                    "invoice_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Invoice price per unit at time of return (snapshot).",
                        max_digits=10,
                    ),
                ),
                ("loss_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "rtd",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Return-to-distributor rate quoted on credit note lines.",
                        max_digits=6,
                    ),
                ),
                (
                    "credit_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("received", "Received"), ("alert", "Alert")],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("credit_status_changed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="products.product",
                    ),
                ),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="returns",
                        to="products.stockbatch",
                    ),
                ),
                (
                    "staff",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="returns",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["return_date", "id"],
                "indexes": [
                    models.Index(fields=["batch"], name="return_batch_idx"),
                    models.Index(fields=["type", "return_date"], name="return_type_date_idx"),
                    models.Index(fields=["credit_status", "type"], name="return_status_type_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0),
                        name="chk_return_qty_gt_zero",
                    ),
                ],
            },
        ),
    ]
