# reconciliation/tests/test_intake_and_settlement.py

from datetime import date
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from products.models import Product, StockBatch
from purchases.models import Invoice
from reconciliation.documents import (
    ParsedBill,
    ParsedCreditNote,
    ParsedCreditNoteItem,
    ParsedRosReceipt,
)
from reconciliation.models import CreditNote, RosReceipt, RosReceiptClearedItem
from reconciliation.services import (
    clear_from_receipt,
    credit_notes_missing_from_system,
    invoices_missing_from_system,
    list_credit_notes,
    list_ros_receipts,
    record_ros_receipt,
    store_credit_notes,
)
from returns.models import Return
from returns.services.return_service import process_grm_return, process_gvn_damage


def _note(number="CN-1", return_date=date(2025, 1, 4), quantity=10, rtd=Decimal("15.00")):
    return ParsedCreditNote(
        credit_note_number=number,
        date=date(2025, 1, 20),
        return_date=return_date,
        receiver_name="Bakery Outlet 1",
        items=[
            ParsedCreditNoteItem(
                item_code="OG1001",
                item_name="Black Forest Slice",
                quantity=quantity,
                rtd=rtd,
                return_date=return_date,
            )
        ],
    )


def _receipt(number="ROS-1", bills=None):
    return ParsedRosReceipt(
        receipt_number=number,
        receipt_date=date(2025, 1, 25),
        received_from="Supplier",
        total_amount=Decimal("500.00"),
        bills=bills or [],
    )


class CreditNoteIntakeTests(TestCase):
    """
    Credit note upload tests.

    GUARANTEES:
    - Stored notes are reconciled immediately
    - Existing (number, return_date) pairs become warnings, not failures
    - Malformed embedded items are skipped on read
    - One upload is one reconciliation run, whatever the note order
    - A failed upload leaves nothing stored
    """

    def setUp(self):
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

    def test_upload_stores_and_reconciles(self):
        result = store_credit_notes([_note()], source_file="cn-1.pdf")

        self.assertEqual(len(result.stored), 1)
        self.assertEqual(result.warnings, [])
        note = result.stored[0].credit_note
        self.assertEqual(note.total_items, 1)
        self.assertEqual(note.items[0]["itemCode"], "OG1001")

        self.entry.refresh_from_db()
        self.assertEqual(self.entry.credit_status, Return.CREDIT_RECEIVED)

    def test_same_file_resubmit_is_a_warning(self):
        store_credit_notes([_note()], source_file="cn-1.pdf")

        result = store_credit_notes([_note()], source_file="cn-1.pdf")

        self.assertEqual(result.stored, [])
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("same file", result.warnings[0])
        self.assertEqual(CreditNote.objects.count(), 1)

    def test_different_file_duplicate_is_a_warning(self):
        store_credit_notes([_note()], source_file="cn-1.pdf")

        result = store_credit_notes([_note(), _note(return_date=date(2025, 1, 5))], source_file="other.pdf")

        self.assertEqual(len(result.stored), 1)
        self.assertIn("different file", result.warnings[0])
        self.assertEqual(CreditNote.objects.count(), 2)

    def test_malformed_items_are_skipped_on_read(self):
        note = CreditNote.objects.create(
            credit_note_number="CN-9",
            date=date(2025, 1, 20),
            return_date=date(2025, 1, 4),
            items=[
                {"itemCode": "OG1001"},
                {"itemCode": "OG1001", "quantity": "x", "rtd": "15.00"},
                {"itemCode": "OG1001", "quantity": 3, "rtd": "15.00", "returnDate": "2025-01-04"},
            ],
        )

        lines = note.parsed_items()

        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].quantity, 3)

    def test_list_credit_notes_by_month(self):
        store_credit_notes([_note()], source_file="cn-1.pdf")

        self.assertEqual(list_credit_notes("2025-01").count(), 1)
        self.assertEqual(list_credit_notes("2025-02").count(), 0)

    # =====================================================
    # ONE RUN PER UPLOAD
    # =====================================================

    def _damage_same_day(self):
        fresh = StockBatch.objects.create(
            product=self.entry.product, quantity_received=6, invoice_date=date(2025, 1, 4)
        )
        summary = process_gvn_damage(
            damage_date=date(2025, 1, 4),
            items=[{"product_id": fresh.product_id, "batch_id": fresh.pk, "quantity": 2, "invoice_price": "12.00"}],
        )
        return Return.objects.get(pk=summary.return_ids[0])

    def _upload_in_order(self, notes):
        damage = self._damage_same_day()

        result = store_credit_notes(notes, source_file="cn-batch.pdf")

        self.entry.refresh_from_db()
        damage.refresh_from_db()
        self.assertEqual(self.entry.credit_status, Return.CREDIT_RECEIVED)
        self.assertEqual(damage.credit_status, Return.CREDIT_RECEIVED)
        self.assertEqual(result.reconciliation.alerted_ids, [])
        return result, damage

    def test_grm_then_gvn_note_in_one_upload(self):
        result, damage = self._upload_in_order(
            [_note("CN-GRM"), _note("CN-GVN", quantity=2, rtd=Decimal("0.00"))]
        )

        by_number = {s.credit_note.credit_note_number: s.reconciliation for s in result.stored}
        self.assertEqual(by_number["CN-GRM"].received_ids, [self.entry.pk])
        self.assertEqual(by_number["CN-GVN"].received_ids, [damage.pk])

    def test_gvn_then_grm_note_in_one_upload(self):
        result, damage = self._upload_in_order(
            [_note("CN-GVN", quantity=2, rtd=Decimal("0.00")), _note("CN-GRM")]
        )

        self.assertEqual(result.stored[0].reconciliation.received_ids, [damage.pk])
        self.assertEqual(result.stored[1].reconciliation.received_ids, [self.entry.pk])

    def test_leftover_is_reported_on_the_run(self):
        damage = self._damage_same_day()

        result = store_credit_notes([_note()], source_file="cn-1.pdf")

        damage.refresh_from_db()
        self.assertEqual(damage.credit_status, Return.CREDIT_ALERT)
        self.assertEqual(result.reconciliation.alerted_ids, [damage.pk])
        self.assertEqual(result.stored[0].reconciliation.alerted_ids, [])

    def test_failed_reconciliation_leaves_nothing_stored(self):
        with mock.patch(
            "reconciliation.services.credit_note_intake.reconcile_credit_note",
            side_effect=RuntimeError("matcher down"),
        ):
            with self.assertRaises(RuntimeError):
                store_credit_notes([_note()], source_file="cn-1.pdf")

        self.assertEqual(CreditNote.objects.count(), 0)

        retry = store_credit_notes([_note()], source_file="cn-1.pdf")

        self.assertEqual(len(retry.stored), 1)
        self.assertEqual(retry.warnings, [])
        self.entry.refresh_from_db()
        self.assertEqual(self.entry.credit_status, Return.CREDIT_RECEIVED)




class SettlementTests(TestCase):
    """
    ROS receipt clearing tests.

    GUARANTEES:
    - SR bills clear invoices with a matching amount
    - CN bills clear every credit note row with the number
    - Reprocessing never duplicates cleared items
    """

    def setUp(self):
        self.invoice = Invoice.objects.create(
            invoice_number="INV-100",
            invoice_date=date(2025, 1, 10),
            total_amount=Decimal("500.00"),
        )

    def test_sr_bill_clears_invoice_once(self):
        bills = [ParsedBill(doc_type="SR", bill_number="INV-100", amount=Decimal("500.00"))]

        first = record_ros_receipt(_receipt(bills=bills), source_file="ros-1.pdf")
        second = record_ros_receipt(_receipt(bills=bills), source_file="ros-1.pdf")

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.STATUS_CLEARED)
        self.assertTrue(first.created)
        self.assertFalse(second.created)
        self.assertEqual(RosReceipt.objects.count(), 1)

        cleared = RosReceiptClearedItem.objects.get()
        self.assertEqual(cleared.item_type, RosReceiptClearedItem.ITEM_INVOICE)
        self.assertEqual(cleared.item_id, self.invoice.pk)
        self.assertEqual(cleared.amount, Decimal("500.00"))

    def test_amount_mismatch_leaves_invoice_pending(self):
        bills = [ParsedBill(doc_type="SR", bill_number="INV-100", amount=Decimal("499.00"))]

        outcome = record_ros_receipt(_receipt(bills=bills))

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.STATUS_PENDING)
        self.assertEqual(len(outcome.clearing.skipped), 1)
        self.assertEqual(RosReceiptClearedItem.objects.count(), 0)

    def test_amount_within_tolerance_clears(self):
        bills = [ParsedBill(doc_type="SR", bill_number="INV-100", amount=Decimal("500.005"))]

        record_ros_receipt(_receipt(bills=bills))

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.STATUS_CLEARED)

    def test_cn_bill_clears_every_row_of_the_number(self):
        for return_date in (date(2025, 1, 4), date(2025, 1, 5)):
            CreditNote.objects.create(credit_note_number="CN-7", date=date(2025, 1, 20), return_date=return_date)

        outcome = record_ros_receipt(
            _receipt(bills=[ParsedBill(doc_type="CN", bill_number="CN-7", amount=Decimal("36.00"))])
        )

        self.assertEqual(len(outcome.clearing.cleared), 2)
        self.assertEqual(
            set(CreditNote.objects.values_list("status", flat=True)),
            {CreditNote.STATUS_CLEARED},
        )

    def test_unknown_and_unmatched_bills_are_skipped(self):
        receipt = RosReceipt.objects.create(receipt_number="ROS-9", receipt_date=date(2025, 1, 25))

        result = clear_from_receipt(
            receipt,
            [
                ParsedBill(doc_type="XX", bill_number="INV-100", amount=Decimal("500.00")),
                ParsedBill(doc_type="SR", bill_number="INV-404", amount=Decimal("1.00")),
            ],
        )

        self.assertEqual(result.cleared, [])
        self.assertEqual(len(result.skipped), 2)

    def test_credit_note_stored_after_receipt_is_cleared(self):
        record_ros_receipt(
            _receipt(bills=[ParsedBill(doc_type="CN", bill_number="CN-1", amount=Decimal("18.00"))])
        )

        result = store_credit_notes([_note()], source_file="cn-1.pdf")

        note = result.stored[0].credit_note
        self.assertEqual(note.status, CreditNote.STATUS_CLEARED)
        self.assertTrue(
            RosReceiptClearedItem.objects.filter(
                item_type=RosReceiptClearedItem.ITEM_CREDIT_NOTE, item_id=note.pk
            ).exists()
        )

    def test_missing_documents(self):
        record_ros_receipt(
            _receipt(
                bills=[
                    ParsedBill(doc_type="SR", bill_number="INV-100", amount=Decimal("500.00")),
                    ParsedBill(doc_type="SR", bill_number="INV-404", amount=Decimal("80.00")),
                    ParsedBill(doc_type="CN", bill_number="CN-404", amount=Decimal("9.00")),
                ]
            )
        )

        self.assertEqual([m.bill_number for m in invoices_missing_from_system("2025-01")], ["INV-404"])
        self.assertEqual([m.bill_number for m in credit_notes_missing_from_system("2025-01")], ["CN-404"])
        self.assertEqual(invoices_missing_from_system("2025-02"), [])
        self.assertEqual(list_ros_receipts("2025-01").count(), 1)

    def test_reverse_clearing_needs_the_exact_number(self):
        record_ros_receipt(
            _receipt(bills=[ParsedBill(doc_type="CN", bill_number="CN-10", amount=Decimal("18.00"))])
        )

        result = store_credit_notes([_note("CN-1")], source_file="cn-1.pdf")

        self.assertEqual(result.stored[0].credit_note.status, CreditNote.STATUS_PENDING)
        self.assertEqual(RosReceiptClearedItem.objects.count(), 0)
