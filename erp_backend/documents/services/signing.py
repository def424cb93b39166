"""
======================================================
PATH: documents/services/signing.py
======================================================
SIGNATURE CAPTURE + CLOSING AUTO-ADVANCE

sign_document():
1) load the document for the caller's tenant
2) capture the signature through the ledger
3) if the signer closes the document (cliente on an in-transit sale,
   proveedor on a returning purchase) request the terminal transition

The signature is kept even when step 3 fails. The failure is logged
and handed back as transition_error for the caller to report.
======================================================
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from documents.domain import Document, LifecycleContext, SignatureRecord
from documents.services.exceptions import LifecycleError
from documents.services.lifecycle_engine import LifecycleEngine
from documents.services.signature_ledger import SignatureLedger
from documents.services.signature_policy import closing_target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureOutcome:
    signature: SignatureRecord
    document: Document
    transition_error: Optional[LifecycleError] = None


def sign_document(
    *,
    engine: LifecycleEngine,
    ledger: SignatureLedger,
    kind: str,
    document_id: uuid.UUID,
    role: str,
    image_data: Any,
    context: LifecycleContext,
    location: Optional[Mapping[str, Any]] = None,
    face_auth_data: Optional[Mapping[str, Any]] = None,
) -> SignatureOutcome:
    with engine.documents.atomic():
        document = engine.load_for_tenant(kind, document_id, context.tenant_id)
        record = ledger.capture(
            document,
            role,
            image_data,
            captured_by_id=context.actor_id,
            location=location,
            face_auth_data=face_auth_data,
        )

    target = closing_target(document, role)
    if target is None:
        return SignatureOutcome(signature=record, document=document)

    try:
        document = engine.request_transition(kind, document.id, target, context)
    except LifecycleError as exc:
        logger.warning(
            "Auto-advance after closing signature failed",
            extra={
                "document_kind": kind,
                "document_id": str(document.id),
                "role": role,
                "target_state": target,
                "error_code": exc.code,
            },
        )
        return SignatureOutcome(
            signature=record,
            document=engine.documents.load(kind, document.id),
            transition_error=exc,
        )

    return SignatureOutcome(signature=record, document=document)
