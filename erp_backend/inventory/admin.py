from django.contrib import admin

from inventory.models import Location, Product, StockLevel, StockMovement


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "tenant_id", "unit", "unit_price", "is_active")
    list_filter = ("is_active", "tenant_id")
    search_fields = ("name", "sku")


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "location_type", "tenant_id", "is_active")
    list_filter = ("is_active", "location_type")
    search_fields = ("name",)


@admin.register(StockLevel)
class StockLevelAdmin(admin.ModelAdmin):
    list_display = ("product", "location", "quantity", "updated_at")
    readonly_fields = ("product", "location", "quantity", "updated_at")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("product", "location", "movement_type", "reason", "quantity", "created_at")
    list_filter = ("movement_type", "reason")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
