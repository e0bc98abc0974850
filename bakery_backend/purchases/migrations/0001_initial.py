"""
======================================================
PATH: purchases/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Invoice, InvoiceItem

Purpose:
- Supplier invoice header (unique invoice number, pending/cleared settlement)
- Invoice lines stored as printed
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
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(max_length=64, unique=True)),
                ("invoice_date", models.DateField(db_index=True)),
                ("store_name", models.CharField(blank=True, default="", max_length=255)),
                ("customer_name", models.CharField(blank=True, default="", max_length=255)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("source_file", models.CharField(blank=True, default="", max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("cleared", "Cleared")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "received_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices_received",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-invoice_date", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_amount__gte=Decimal("0.00")),
                        name="invoice_total_nonnegative",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["status", "invoice_date"], name="invoice_status_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sl_no", models.PositiveIntegerField(default=0)),
                ("item_code", models.CharField(max_length=64)),
                ("item_name", models.CharField(max_length=255)),
                ("hsn_code", models.CharField(blank=True, default="", max_length=32)),
                ("quantity", models.PositiveIntegerField()),
                ("uom", models.CharField(blank=True, default="", max_length=16)),
                ("rate", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="purchases.invoice",
                    ),
                ),
            ],
            options={
                "ordering": ["sl_no", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0),
                        name="invoice_item_quantity_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(rate__gte=Decimal("0.00")),
                        name="invoice_item_rate_nonnegative",
                    ),
                ],
            },
        ),
    ]
