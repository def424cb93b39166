# transfers/serializers.py

from rest_framework import serializers

from transfers.models import Transfer


class TransferSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    from_location_name = serializers.CharField(source="from_location.name", read_only=True)
    to_location_name = serializers.CharField(source="to_location.name", read_only=True)

    class Meta:
        model = Transfer
        fields = [
            "id",
            "folio",
            "status",
            "side_effects_applied",
            "product",
            "product_name",
            "from_location",
            "from_location_name",
            "to_location",
            "to_location_name",
            "quantity",
            "notes",
            "cancel_reason",
            "completed_at",
            "cancelled_at",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TransferCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    from_location_id = serializers.UUIDField()
    to_location_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TransferCompleteSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TransferCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
