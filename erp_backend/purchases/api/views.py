# purchases/api/views.py

"""
PURCHASES API

- POST /api/purchases/                      register (COMP folio)
- GET  /api/purchases/                      list (filters: status, folio, purchase_type)
- GET  /api/purchases/{id}/                 retrieve
- POST /api/purchases/{id}/status/          lifecycle transition
- GET|POST /api/purchases/{id}/signatures/  signatures (proveedor closes the purchase)
- GET  /api/purchases/{id}/transitions/     audit history
- /api/purchases/providers/                 provider master data

Security:
- reads: documents.view, writes: purchases.manage,
  signature capture: signatures.capture
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
from permissions.roles import CAP_DOCUMENTS_VIEW, CAP_PURCHASES_MANAGE, HasCapability
from purchases.models import Provider, Purchase
from purchases.serializers import (
    ProviderSerializer,
    PurchaseCreateSerializer,
    PurchaseSerializer,
)
from purchases.services.purchase_service import register_purchase


class PurchaseViewSet(
    LifecycleViewSetMixin,
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = PurchaseSerializer
    document_kind = DocumentKind.PURCHASE
    manage_capability = CAP_PURCHASES_MANAGE
    filterset_fields = ["status", "folio", "purchase_type", "provider"]
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def get_queryset(self):
        return (
            Purchase.objects.filter(tenant_id=tenant_id_for(self.request))
            .select_related("product", "location", "provider")
            .order_by("-created_at")
        )

    @extend_schema(request=PurchaseCreateSerializer, responses={201: PurchaseSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PurchaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tenant_id = tenant_id_for(request)
        product = Product.objects.filter(pk=data["product_id"], tenant_id=tenant_id).first()
        location = Location.objects.filter(pk=data["location_id"], tenant_id=tenant_id).first()
        if product is None or location is None:
            return error_response(
                code="NOT_FOUND",
                message="Product or location not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        provider = None
        if data.get("provider_id"):
            provider = Provider.objects.filter(
                pk=data["provider_id"], tenant_id=tenant_id
            ).first()
            if provider is None:
                return error_response(
                    code="NOT_FOUND",
                    message="Provider not found.",
                    http_status=status.HTTP_404_NOT_FOUND,
                )

        try:
            purchase = register_purchase(
                tenant_id=tenant_id,
                product=product,
                location=location,
                provider=provider,
                quantity=data["quantity"],
                unit_price=data["unit_price"],
                purchase_type=data["purchase_type"],
                vehicle=data.get("vehicle", ""),
                driver_name=data.get("driver_name", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)


class ProviderViewSet(viewsets.ModelViewSet):
    serializer_class = ProviderSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_fields = ["is_active"]
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def get_permissions(self):
        self.required_capability = (
            CAP_DOCUMENTS_VIEW if self.action in ("list", "retrieve") else CAP_PURCHASES_MANAGE
        )
        return super().get_permissions()

    def get_queryset(self):
        return Provider.objects.filter(tenant_id=tenant_id_for(self.request))

    def perform_create(self, serializer):
        serializer.save(tenant_id=tenant_id_for(self.request))
