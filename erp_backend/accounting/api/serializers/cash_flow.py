# accounting/api/serializers/cash_flow.py

from rest_framework import serializers

from accounting.models import CashFlowEntry


class CashFlowEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = CashFlowEntry
        fields = [
            "id",
            "amount",
            "movement_type",
            "source_type",
            "reference_type",
            "reference_id",
            "description",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class CashFlowSummarySerializer(serializers.Serializer):
    ingresos = serializers.DecimalField(max_digits=14, decimal_places=2)
    egresos = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
