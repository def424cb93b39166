# accounting/api/views/cash_flow.py

"""
CASH FLOW API (READ-ONLY)

GET /api/accounting/cash-flow/
    - filters: movement_type, source_type, reference_type, reference_id
GET /api/accounting/cash-flow/summary/
    - totals for the caller's tenant

Entries are written only by the document side-effect dispatcher.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers import CashFlowEntrySerializer, CashFlowSummarySerializer
from accounting.models import CashFlowEntry
from accounting.services.cash_flow import cash_flow_summary
from documents.api.tenancy import tenant_id_for
from permissions.roles import CAP_CASHFLOW_VIEW, HasCapability


class CashFlowViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = CashFlowEntrySerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CASHFLOW_VIEW
    filterset_fields = ["movement_type", "source_type", "reference_type", "reference_id"]

    def get_queryset(self):
        return CashFlowEntry.objects.filter(
            tenant_id=tenant_id_for(self.request)
        ).order_by("-created_at")

    @extend_schema(responses={200: CashFlowSummarySerializer})
    @action(detail=False, methods=["get"], url_path="summary")
    def summary(self, request):
        data = cash_flow_summary(tenant_id=tenant_id_for(request))
        return Response(CashFlowSummarySerializer(data).data)
