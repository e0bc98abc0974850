# reconciliation/admin.py

from django.contrib import admin

from reconciliation.models import CreditNote, RosReceipt, RosReceiptClearedItem


@admin.register(CreditNote)
class CreditNoteAdmin(admin.ModelAdmin):
    list_display = ("credit_note_number", "date", "return_date", "total_items", "net_value", "status")
    list_filter = ("status", "return_date")
    search_fields = ("credit_note_number", "receiver_name")
    readonly_fields = ("items", "source_file", "created_at")

    def has_delete_permission(self, request, obj=None):
        return False


class ClearedItemInline(admin.TabularInline):
    model = RosReceiptClearedItem
    extra = 0
    can_delete = False
    readonly_fields = ("item_type", "item_id", "bill_number", "amount", "cleared_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(RosReceipt)
class RosReceiptAdmin(admin.ModelAdmin):
    list_display = ("receipt_number", "receipt_date", "received_from", "total_amount", "payment_method")
    search_fields = ("receipt_number",)
    readonly_fields = ("bills", "source_file", "created_at")
    inlines = [ClearedItemInline]

    def has_delete_permission(self, request, obj=None):
        return False
