# purchases/admin.py

from django.contrib import admin

from purchases.models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    fields = ("sl_no", "item_code", "item_name", "quantity", "uom", "rate", "total")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "invoice_date", "store_name", "total_amount", "status")
    list_filter = ("status", "invoice_date")
    search_fields = ("invoice_number", "store_name")
    readonly_fields = ("invoice_number", "invoice_date", "total_amount", "source_file", "created_at")
    inlines = [InvoiceItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
