from django.contrib import admin

from accounting.models import CashFlowEntry


@admin.register(CashFlowEntry)
class CashFlowEntryAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "tenant_id",
        "movement_type",
        "source_type",
        "amount",
        "reference_type",
        "description",
    )
    list_filter = ("movement_type", "source_type", "tenant_id")
    search_fields = ("description",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
