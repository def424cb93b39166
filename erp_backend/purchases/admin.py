from django.contrib import admin

from purchases.models import Provider, Purchase


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = ("name", "tax_id", "tenant_id", "is_active")
    search_fields = ("name", "tax_id")


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = (
        "folio",
        "tenant_id",
        "status",
        "purchase_type",
        "product",
        "quantity",
        "total_amount",
        "created_at",
    )
    list_filter = ("status", "purchase_type")
    search_fields = ("folio",)
    readonly_fields = ("status", "side_effects_applied", "folio", "total_amount", "notes")

    def has_delete_permission(self, request, obj=None):
        return False
