"""
======================================================
PATH: reconciliation/migrations/0001_initial.py
======================================================
MIGRATION: CREATE CreditNote, RosReceipt, RosReceiptClearedItem

Purpose:
- Credit notes stored per (number, return_date)
- ROS receipts with their settled bills
- Cleared-item upsert key (receipt, item_type, item_id)
"""

from __future__ import annotations

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("returns", "0001_initial"),
        ("purchases", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CreditNote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("credit_note_number", models.CharField(db_index=True, max_length=64)),
                ("date", models.DateField(help_text="Date printed on the credit note.")),
                ("return_date", models.DateField(db_index=True, help_text="Return date the lines of this row cover.")),
                ("receiver_name", models.CharField(blank=True, default="", max_length=255)),
                ("receiver_gstin", models.CharField(blank=True, default="", max_length=32)),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("total_items", models.PositiveIntegerField(default=0)),
                ("gross_value", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("net_value", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("source_file", models.CharField(blank=True, default="", max_length=255)),
                ("items", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("cleared", "Cleared")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-return_date", "-id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("credit_note_number", "return_date"),
                        name="uniq_credit_note_number_return_date",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["status", "date"], name="creditnote_status_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RosReceipt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("receipt_number", models.CharField(max_length=64, unique=True)),
                ("receipt_date", models.DateField(db_index=True)),
                ("received_from", models.CharField(blank=True, default="", max_length=255)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("payment_method", models.CharField(blank=True, default="", max_length=64)),
                ("bills", models.JSONField(blank=True, default=list)),
                ("source_file", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-receipt_date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="RosReceiptClearedItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "item_type",
                    models.CharField(
                        choices=[("invoice", "Invoice"), ("credit_note", "Credit note")],
                        max_length=16,
                    ),
                ),
                ("item_id", models.PositiveBigIntegerField()),
                ("bill_number", models.CharField(max_length=64)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("cleared_at", models.DateTimeField(auto_now=True)),
                (
                    "ros_receipt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cleared_items",
                        to="reconciliation.rosreceipt",
                    ),
                ),
            ],
            options={
                "ordering": ["ros_receipt_id", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("ros_receipt", "item_type", "item_id"),
                        name="uniq_ros_cleared_item",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["item_type", "item_id"], name="ros_cleared_item_idx"),
                ],
            },
        ),
    ]
