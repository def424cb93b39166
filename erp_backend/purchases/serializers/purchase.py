# purchases/serializers/purchase.py

from rest_framework import serializers

from documents.choices import PurchaseType
from purchases.models import Provider, Purchase


class ProviderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Provider
        fields = ["id", "name", "tax_id", "phone", "email", "is_active", "created_at"]
        read_only_fields = ["id", "created_at"]


class PurchaseSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    location_name = serializers.CharField(source="location.name", read_only=True)
    provider_name = serializers.CharField(source="provider.name", read_only=True, default=None)

    class Meta:
        model = Purchase
        fields = [
            "id",
            "folio",
            "status",
            "side_effects_applied",
            "purchase_type",
            "provider",
            "provider_name",
            "product",
            "product_name",
            "location",
            "location_name",
            "quantity",
            "unit_price",
            "total_amount",
            "vehicle",
            "driver_name",
            "notes",
            "loading_time",
            "return_time",
            "completion_time",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PurchaseCreateSerializer(serializers.Serializer):
    provider_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    product_id = serializers.UUIDField()
    location_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    purchase_type = serializers.ChoiceField(
        choices=PurchaseType.choices, default=PurchaseType.PLANTA
    )
    vehicle = serializers.CharField(required=False, allow_blank=True, default="")
    driver_name = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
