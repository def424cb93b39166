# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET

- POST /api/sales/                      register (stock checked, VENT folio)
- GET  /api/sales/                      list (filters: status, folio, delivery_type)
- GET  /api/sales/{id}/                 retrieve
- POST /api/sales/{id}/status/          lifecycle transition
- GET|POST /api/sales/{id}/signatures/  signatures (cliente closes the sale)
- GET  /api/sales/{id}/transitions/     audit history

Security:
- Requires IsAuthenticated
- reads: documents.view, writes: sales.manage,
  signature capture: signatures.capture

All queries are scoped to request.user.tenant_id.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from documents.api.errors import error_response, lifecycle_error_response
from documents.api.mixins import LifecycleViewSetMixin
from documents.api.tenancy import tenant_id_for
from documents.choices import DocumentKind
from documents.services.exceptions import LifecycleError
from inventory.models import Location, Product
from permissions.roles import CAP_DOCUMENTS_VIEW, CAP_SALES_MANAGE, HasCapability
from sales.models import Client, Sale
from sales.serializers import ClientSerializer, SaleCreateSerializer, SaleSerializer
from sales.services.sale_service import register_sale

UUID_LOOKUP = r"[0-9a-fA-F-]{32,36}"


class SaleViewSet(
    LifecycleViewSetMixin,
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = SaleSerializer
    document_kind = DocumentKind.SALE
    manage_capability = CAP_SALES_MANAGE
    filterset_fields = ["status", "folio", "delivery_type", "client"]
    lookup_value_regex = UUID_LOOKUP

    def get_queryset(self):
        return (
            Sale.objects.filter(tenant_id=tenant_id_for(self.request))
            .select_related("product", "location", "client")
            .order_by("-created_at")
        )

    @extend_schema(request=SaleCreateSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        serializer = SaleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tenant_id = tenant_id_for(request)
        product = Product.objects.filter(pk=data["product_id"], tenant_id=tenant_id).first()
        location = Location.objects.filter(pk=data["location_id"], tenant_id=tenant_id).first()
        client = None
        if data.get("client_id"):
            client = Client.objects.filter(pk=data["client_id"], tenant_id=tenant_id).first()
            if client is None:
                return error_response(
                    code="NOT_FOUND",
                    message="Client not found.",
                    http_status=status.HTTP_404_NOT_FOUND,
                )
        if product is None or location is None:
            return error_response(
                code="NOT_FOUND",
                message="Product or location not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        try:
            sale = register_sale(
                tenant_id=tenant_id,
                product=product,
                location=location,
                client=client,
                quantity=data["quantity"],
                unit_price=data["unit_price"],
                delivery_type=data["delivery_type"],
                vehicle=data.get("vehicle", ""),
                driver_name=data.get("driver_name", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


class ClientViewSet(viewsets.ModelViewSet):
    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_fields = ["is_active"]
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def get_permissions(self):
        self.required_capability = (
            CAP_DOCUMENTS_VIEW if self.action in ("list", "retrieve") else CAP_SALES_MANAGE
        )
        return super().get_permissions()

    def get_queryset(self):
        return Client.objects.filter(tenant_id=tenant_id_for(self.request))

    def perform_create(self, serializer):
        serializer.save(tenant_id=tenant_id_for(self.request))
