# inventory/serializers.py

from rest_framework import serializers

from inventory.models import Location, Product, StockLevel, StockMovement


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "unit",
            "unit_price",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_unit_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Unit price cannot be negative.")
        return value

    def validate_sku(self, value):
        value = (value or "").strip()
        request = self.context.get("request")
        tenant_id = getattr(getattr(request, "user", None), "tenant_id", None)
        qs = Product.objects.filter(tenant_id=tenant_id, sku=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A product with this SKU already exists.")
        return value


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = [
            "id",
            "name",
            "location_type",
            "address",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class StockLevelSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    location_name = serializers.CharField(source="location.name", read_only=True)
    location_type = serializers.CharField(source="location.location_type", read_only=True)

    class Meta:
        model = StockLevel
        fields = [
            "product",
            "product_name",
            "location",
            "location_name",
            "location_type",
            "quantity",
            "updated_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "location",
            "movement_type",
            "reason",
            "quantity",
            "document_kind",
            "document_id",
            "note",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class StockAdjustmentInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    location_id = serializers.UUIDField()
    quantity_delta = serializers.IntegerField()
    note = serializers.CharField(required=False, allow_blank=True, default="")
