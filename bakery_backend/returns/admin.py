# returns/admin.py

from django.contrib import admin

from returns.models import Return


# ======================================================
# RETURN ADMIN (READ-ONLY: rows are stock allocations)
# ======================================================


@admin.register(Return)
class ReturnAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "type",
        "return_date",
        "product",
        "batch",
        "quantity",
        "loss_amount",
        "credit_status",
    )
    list_filter = ("type", "credit_status", "return_date")
    search_fields = ("product__name", "product__item_code")
    list_select_related = ("product", "batch")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
