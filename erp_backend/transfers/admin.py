from django.contrib import admin

from transfers.models import Transfer


@admin.register(Transfer)
class TransferAdmin(admin.ModelAdmin):
    list_display = (
        "folio",
        "tenant_id",
        "status",
        "product",
        "from_location",
        "to_location",
        "quantity",
        "created_at",
    )
    list_filter = ("status",)
    search_fields = ("folio",)
    readonly_fields = ("status", "side_effects_applied", "folio", "cancel_reason", "notes")

    def has_delete_permission(self, request, obj=None):
        return False
