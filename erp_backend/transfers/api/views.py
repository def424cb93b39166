# transfers/api/views.py

"""
TRANSFERS API

- POST /api/transfers/                  create (TRAS folio, pending)
- GET  /api/transfers/                  list (filters: status, folio, product)
- GET  /api/transfers/{id}/             retrieve
- POST /api/transfers/{id}/complete/    move stock from -> to
- POST /api/transfers/{id}/cancel/      {reason}
- GET  /api/transfers/{id}/transitions/ audit history

Security:
- reads: documents.view, writes: transfers.manage
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from documents.api.errors import error_response, lifecycle_error_response
from documents.api.serializers import TransitionRecordSerializer
from documents.api.tenancy import tenant_id_for
from documents.choices import DocumentKind
from documents.services.exceptions import LifecycleError
from documents.services.factory import build_engine
from inventory.models import Location, Product
from permissions.roles import CAP_DOCUMENTS_VIEW, CAP_TRANSFERS_MANAGE, HasCapability
from transfers.models import Transfer
from transfers.serializers import (
    TransferCancelSerializer,
    TransferCompleteSerializer,
    TransferCreateSerializer,
    TransferSerializer,
)
from transfers.services.transfer_service import (
    cancel_transfer,
    complete_transfer,
    create_transfer,
)

READ_ACTIONS = {"list", "retrieve", "transitions"}


class TransferViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = TransferSerializer
    filterset_fields = ["status", "folio", "product"]
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def get_permissions(self):
        self.required_capability = (
            CAP_DOCUMENTS_VIEW if self.action in READ_ACTIONS else CAP_TRANSFERS_MANAGE
        )
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        return (
            Transfer.objects.filter(tenant_id=tenant_id_for(self.request))
            .select_related("product", "from_location", "to_location")
            .order_by("-created_at")
        )

    def _refreshed(self, transfer_id):
        return TransferSerializer(self.get_queryset().get(pk=transfer_id)).data

    @extend_schema(request=TransferCreateSerializer, responses={201: TransferSerializer})
    def create(self, request, *args, **kwargs):
        serializer = TransferCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tenant_id = tenant_id_for(request)
        product = Product.objects.filter(pk=data["product_id"], tenant_id=tenant_id).first()
        locations = {
            loc.pk: loc
            for loc in Location.objects.filter(
                pk__in=[data["from_location_id"], data["to_location_id"]],
                tenant_id=tenant_id,
            )
        }
        from_location = locations.get(data["from_location_id"])
        to_location = locations.get(data["to_location_id"])
        if product is None or from_location is None or to_location is None:
            return error_response(
                code="NOT_FOUND",
                message="Product or location not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        try:
            transfer = create_transfer(
                tenant_id=tenant_id,
                product=product,
                from_location=from_location,
                to_location=to_location,
                quantity=data["quantity"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        return Response(
            {
                "transfer": TransferSerializer(transfer).data,
                "message": f"Transfer {transfer.folio} created",
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=TransferCompleteSerializer, responses={200: TransferSerializer})
    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        serializer = TransferCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            document = complete_transfer(
                tenant_id=tenant_id_for(request),
                transfer_id=pk,
                user=request.user,
                notes=serializer.validated_data.get("notes", ""),
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        return Response(self._refreshed(document.id))

    @extend_schema(request=TransferCancelSerializer, responses={200: TransferSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        serializer = TransferCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            document = cancel_transfer(
                tenant_id=tenant_id_for(request),
                transfer_id=pk,
                reason=serializer.validated_data.get("reason"),
                user=request.user,
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        return Response(self._refreshed(document.id))

    @extend_schema(responses={200: TransitionRecordSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="transitions")
    def transitions(self, request, pk=None):
        try:
            records = build_engine().history(
                DocumentKind.TRANSFER, pk, tenant_id_for(request)
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(TransitionRecordSerializer(records, many=True).data)
