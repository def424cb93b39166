# sales/serializers/sale.py

from rest_framework import serializers

from documents.choices import DeliveryType
from sales.models import Sale


class SaleSerializer(serializers.ModelSerializer):
    """
    Read-only representation of a sale.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    location_name = serializers.CharField(source="location.name", read_only=True)
    client_name = serializers.CharField(source="client.name", read_only=True, default=None)

    class Meta:
        model = Sale
        fields = [
            "id",
            "folio",
            "status",
            "side_effects_applied",
            "client",
            "client_name",
            "product",
            "product_name",
            "location",
            "location_name",
            "quantity",
            "unit_price",
            "total_amount",
            "delivery_type",
            "vehicle",
            "driver_name",
            "notes",
            "preparation_time",
            "transit_time",
            "delivery_time",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SaleCreateSerializer(serializers.Serializer):
    client_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    product_id = serializers.UUIDField()
    location_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    delivery_type = serializers.ChoiceField(
        choices=DeliveryType.choices, default=DeliveryType.OWN_FREIGHT
    )
    vehicle = serializers.CharField(required=False, allow_blank=True, default="")
    driver_name = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
