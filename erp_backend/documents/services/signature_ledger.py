"""
======================================================
PATH: documents/services/signature_ledger.py
======================================================
SIGNATURE LEDGER

Records at most one signature per (document, role).

GUARANTEES:
- Append-only: a role that already signed is rejected, never overwritten
- Image payload validated before anything is stored
- A captured signature is visible to the next query immediately
- Terminal documents accept no new signatures

Accepted image payloads:
- "data:image/<subtype>;base64,<payload>" with a non-empty, valid payload
- raw PNG / JPEG / GIF / WEBP bytes (normalised to a data URL)
======================================================
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional

from django.utils import timezone

from documents.domain import Document, SignatureRecord
from documents.services.exceptions import (
    AlreadyTerminal,
    DuplicateSignature,
    InvalidSignatureFormat,
    InvalidSignerRole,
)
from documents.services.signature_policy import allowed_signers
from documents.services.transition_rules import is_terminal
from documents.stores.base import SignatureStore

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:image/([A-Za-z0-9.+-]+);base64,(.*)$", re.DOTALL)

_IMAGE_MAGIC = (
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpeg"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
)


# ============================================================
# IMAGE VALIDATION
# ============================================================


def _sniff_image(raw: bytes) -> Optional[str]:
    for magic, subtype in _IMAGE_MAGIC:
        if raw.startswith(magic):
            return subtype
    if len(raw) >= 12 and raw[:4] == b"RIFF" and raw[8:12] == b"WEBP":
        return "webp"
    return None


def normalize_signature_image(image_data: Any) -> str:
    """
    Validate a signature payload and return it as a data URL.

    Raises InvalidSignatureFormat for anything that is not a
    recognisable, non-empty image.
    """
    if isinstance(image_data, (bytes, bytearray, memoryview)):
        raw = bytes(image_data)
        subtype = _sniff_image(raw)
        if subtype is None:
            raise InvalidSignatureFormat("Signature bytes are not a recognised image.")
        encoded = base64.b64encode(raw).decode("ascii")
        return f"data:image/{subtype};base64,{encoded}"

    if not isinstance(image_data, str):
        raise InvalidSignatureFormat("Signature image is required.")

    value = image_data.strip()
    if not value:
        raise InvalidSignatureFormat("Signature image is required.")

    match = _DATA_URL_RE.match(value)
    if not match:
        raise InvalidSignatureFormat(
            "Invalid signature format. Expected data:image/<type>;base64,<payload>."
        )

    payload = match.group(2)
    if not payload:
        raise InvalidSignatureFormat("Signature payload is empty.")

    try:
        decoded = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidSignatureFormat("Signature payload is not valid base64.")

    if not decoded:
        raise InvalidSignatureFormat("Signature payload is empty.")

    return value


# ============================================================
# LEDGER
# ============================================================


class SignatureLedger:
    def __init__(
        self,
        *,
        store: SignatureStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.clock = clock or timezone.now

    def capture(
        self,
        document: Document,
        role: str,
        image_data: Any,
        *,
        captured_by_id: Any = None,
        location: Optional[Mapping[str, Any]] = None,
        face_auth_data: Optional[Mapping[str, Any]] = None,
    ) -> SignatureRecord:
        if role not in allowed_signers(document.kind):
            raise InvalidSignerRole(document.kind, role)

        if is_terminal(document.kind, document.state):
            raise AlreadyTerminal(document.state)

        image = normalize_signature_image(image_data)

        record = SignatureRecord(
            document_kind=document.kind,
            document_id=document.id,
            role=role,
            image_data=image,
            captured_at=self.clock(),
            tenant_id=document.tenant_id,
            captured_by_id=captured_by_id,
            location=location,
            face_auth_data=face_auth_data,
        )

        if not self.store.insert_if_absent(record):
            raise DuplicateSignature(role)

        logger.info(
            "Signature captured",
            extra={
                "operation": "SIGNATURE_ADDED",
                "document_kind": document.kind,
                "document_id": str(document.id),
                "folio": document.folio,
                "role": role,
                "tenant_id": document.tenant_id,
            },
        )
        return record

    def has_signature(self, document: Document, role: str) -> bool:
        return self.store.get(document.kind, document.id, role) is not None

    def signed_roles(self, document: Document) -> frozenset:
        return frozenset(self.store.roles_for(document.kind, document.id))

    def missing_roles(self, document: Document, roles: Iterable[str]) -> list:
        return sorted(set(roles) - self.signed_roles(document))

    def all_required_present(self, document: Document, roles: Iterable[str]) -> bool:
        return not self.missing_roles(document, roles)
