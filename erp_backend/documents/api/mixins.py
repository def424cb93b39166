"""
======================================================
PATH: documents/api/mixins.py
======================================================
LIFECYCLE VIEWSET MIXIN

Adds the lifecycle actions shared by sales and purchases:

- POST /{id}/status/       {status, notes}        -> request_transition
- GET  /{id}/signatures/                          -> captured signatures
- POST /{id}/signatures/   {role, image, ...}     -> capture (+ auto-advance)
- GET  /{id}/transitions/                         -> audit history

Security:
- reads need documents.view
- writes need the viewset's manage_capability
- signature capture needs signatures.capture

Errors are returned as {"error": {"code", "message", ...}}.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from documents.api.errors import lifecycle_error_response
from documents.api.serializers import (
    SignatureInputSerializer,
    SignatureRecordSerializer,
    TransitionInputSerializer,
    TransitionRecordSerializer,
)
from documents.api.tenancy import context_for, tenant_id_for
from documents.services.exceptions import LifecycleError
from documents.services.factory import build_engine, build_signature_ledger
from documents.services.signing import sign_document
from permissions.roles import CAP_DOCUMENTS_VIEW, CAP_SIGNATURES_CAPTURE, HasCapability

READ_ACTIONS = {"list", "retrieve", "transitions"}


class LifecycleViewSetMixin:
    document_kind: str = ""
    manage_capability: str = ""

    # ======================================================
    # PERMISSIONS
    # ======================================================

    def get_permissions(self):
        if self.action in READ_ACTIONS:
            self.required_capability = CAP_DOCUMENTS_VIEW
        elif self.action == "signatures":
            self.required_capability = (
                CAP_DOCUMENTS_VIEW
                if self.request.method in ("GET", "HEAD", "OPTIONS")
                else CAP_SIGNATURES_CAPTURE
            )
        else:
            self.required_capability = self.manage_capability
        return [IsAuthenticated(), HasCapability()]

    # ======================================================
    # HELPERS
    # ======================================================

    def get_engine(self):
        return build_engine()

    def _refreshed(self, document_id):
        instance = self.get_queryset().get(pk=document_id)
        return self.get_serializer(instance).data

    # ======================================================
    # STATUS TRANSITION
    # ======================================================

    @extend_schema(request=TransitionInputSerializer)
    @action(detail=True, methods=["post"], url_path="status")
    def status(self, request, pk=None):
        serializer = TransitionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            document = self.get_engine().request_transition(
                self.document_kind,
                pk,
                data["status"],
                context_for(request, notes=data.get("notes", "")),
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        return Response(self._refreshed(document.id), status=status.HTTP_200_OK)

    # ======================================================
    # SIGNATURES
    # ======================================================

    @extend_schema(request=SignatureInputSerializer)
    @action(detail=True, methods=["get", "post"], url_path="signatures")
    def signatures(self, request, pk=None):
        engine = self.get_engine()

        if request.method == "GET":
            try:
                engine.load_for_tenant(self.document_kind, pk, tenant_id_for(request))
            except LifecycleError as exc:
                return lifecycle_error_response(exc)
            records = engine.signatures.list_for(self.document_kind, pk)
            return Response(SignatureRecordSerializer(records, many=True).data)

        serializer = SignatureInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            outcome = sign_document(
                engine=engine,
                ledger=build_signature_ledger(),
                kind=self.document_kind,
                document_id=pk,
                role=data["role"],
                image_data=data["image"],
                context=context_for(request),
                location=data.get("location"),
                face_auth_data=data.get("face_auth_data"),
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)

        body = {
            "signature": SignatureRecordSerializer(outcome.signature).data,
            "document": self._refreshed(outcome.document.id),
        }
        if outcome.transition_error is not None:
            exc = outcome.transition_error
            body["transition_error"] = {
                "code": exc.code,
                "message": str(exc),
                **exc.payload(),
            }
        return Response(body, status=status.HTTP_201_CREATED)

    # ======================================================
    # AUDIT HISTORY
    # ======================================================

    @extend_schema(responses={200: TransitionRecordSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="transitions")
    def transitions(self, request, pk=None):
        try:
            records = self.get_engine().history(
                self.document_kind, pk, tenant_id_for(request)
            )
        except LifecycleError as exc:
            return lifecycle_error_response(exc)
        return Response(TransitionRecordSerializer(records, many=True).data)
