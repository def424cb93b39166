# inventory/views.py

"""
INVENTORY API

Endpoints:
- /api/inventory/products/           master data (tenant-scoped)
- /api/inventory/locations/          master data (tenant-scoped)
- GET  /api/inventory/stock/?product_id=<uuid>
      inventory by location (quantity > 0, largest first)
- POST /api/inventory/stock/adjust/  manual correction (admin)
- GET  /api/inventory/stock/movements/?product_id=&location_id=

Records are never hard-deleted; deactivate with is_active=false.
"""

from __future__ import annotations

import uuid

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from documents.api.errors import error_response
from documents.api.tenancy import tenant_id_for
from inventory.models import Location, Product, StockMovement
from inventory.serializers import (
    LocationSerializer,
    ProductSerializer,
    StockAdjustmentInputSerializer,
    StockLevelSerializer,
    StockMovementSerializer,
)
from inventory.services.stock import StockAdjustmentError, adjust_stock, stock_by_location
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasCapability,
)

READ_ACTIONS = {"list", "retrieve", "movements"}


def _parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class CapabilityByActionMixin:
    """
    Reads need inventory.view; writes need inventory.edit.
    """

    write_capability = CAP_INVENTORY_EDIT
    action_capabilities: dict = {}

    def get_permissions(self):
        if self.action in self.action_capabilities:
            self.required_capability = self.action_capabilities[self.action]
        elif self.action in READ_ACTIONS:
            self.required_capability = CAP_INVENTORY_VIEW
        else:
            self.required_capability = self.write_capability
        return [IsAuthenticated(), HasCapability()]


class ProductViewSet(CapabilityByActionMixin, viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    filterset_fields = ["is_active", "sku"]
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def get_queryset(self):
        return Product.objects.filter(tenant_id=tenant_id_for(self.request))

    def perform_create(self, serializer):
        serializer.save(tenant_id=tenant_id_for(self.request))


class LocationViewSet(CapabilityByActionMixin, viewsets.ModelViewSet):
    serializer_class = LocationSerializer
    filterset_fields = ["is_active", "location_type"]
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def get_queryset(self):
        return Location.objects.filter(tenant_id=tenant_id_for(self.request))

    def perform_create(self, serializer):
        serializer.save(tenant_id=tenant_id_for(self.request))


class StockViewSet(CapabilityByActionMixin, viewsets.GenericViewSet):
    serializer_class = StockLevelSerializer
    pagination_class = None
    action_capabilities = {"adjust": CAP_INVENTORY_ADJUST}

    def _product(self, product_id):
        if product_id is None:
            return None
        return Product.objects.filter(
            pk=product_id, tenant_id=tenant_id_for(self.request)
        ).first()

    @extend_schema(
        parameters=[OpenApiParameter("product_id", str, required=True)],
        responses={200: StockLevelSerializer(many=True)},
        description="Inventory by location for one product (quantity > 0, largest first).",
    )
    def list(self, request):
        product_id = (request.query_params.get("product_id") or "").strip()
        if not product_id:
            return error_response(
                code="VALIDATION_ERROR",
                message="product_id is required",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        product = self._product(_parse_uuid(product_id))
        if product is None:
            return error_response(
                code="NOT_FOUND",
                message="Product not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        levels = stock_by_location(
            product_id=product.pk, tenant_id=tenant_id_for(request)
        )
        return Response(StockLevelSerializer(levels, many=True).data)

    @extend_schema(
        request=StockAdjustmentInputSerializer,
        responses={200: StockMovementSerializer},
    )
    @action(detail=False, methods=["post"], url_path="adjust")
    def adjust(self, request):
        serializer = StockAdjustmentInputSerializer(data=request.data)
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

        try:
            result = adjust_stock(
                product=product,
                location=location,
                quantity_delta=data["quantity_delta"],
                user=request.user,
                note=data.get("note", ""),
            )
        except StockAdjustmentError as exc:
            return error_response(
                code="ADJUSTMENT_ERROR",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {
                "quantity": result.level.quantity,
                "movement": StockMovementSerializer(result.movement).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(responses={200: StockMovementSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="movements")
    def movements(self, request):
        qs = StockMovement.objects.filter(
            product__tenant_id=tenant_id_for(request)
        ).order_by("-created_at")

        params = request.query_params
        product_id = _parse_uuid(params.get("product_id"))
        if product_id:
            qs = qs.filter(product_id=product_id)
        location_id = _parse_uuid(params.get("location_id"))
        if location_id:
            qs = qs.filter(location_id=location_id)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockMovementSerializer(page, many=True).data)
        return Response(StockMovementSerializer(qs, many=True).data)
