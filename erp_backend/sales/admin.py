from django.contrib import admin

from sales.models import Client, Sale


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("name", "tax_id", "tenant_id", "is_active")
    search_fields = ("name", "tax_id")


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "folio",
        "tenant_id",
        "status",
        "product",
        "quantity",
        "total_amount",
        "delivery_type",
        "created_at",
    )
    list_filter = ("status", "delivery_type")
    search_fields = ("folio",)
    readonly_fields = ("status", "side_effects_applied", "folio", "total_amount", "notes")

    def has_delete_permission(self, request, obj=None):
        return False
