# documents/services/exceptions.py

"""
DOCUMENT LIFECYCLE ERRORS

Every error carries:
- code:        stable machine identifier used in API bodies
- http_status: status the API layer maps it to

All of them are recoverable by the caller. The engine never retries.
"""

from __future__ import annotations

from typing import Iterable


class LifecycleError(ValueError):
    code = "LIFECYCLE_ERROR"
    http_status = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return "Lifecycle operation failed."

    def payload(self) -> dict:
        return {}


class UnknownDocumentKind(LifecycleError):
    code = "UNKNOWN_DOCUMENT_KIND"


class DocumentNotFound(LifecycleError):
    code = "NOT_FOUND"
    http_status = 404

    def default_message(self) -> str:
        return "Document not found."


class AlreadyTerminal(LifecycleError):
    code = "ALREADY_TERMINAL"
    http_status = 409

    def __init__(self, state: str = "", message: str = ""):
        self.state = state
        super().__init__(
            message or f"Document is already in terminal state '{state}'."
        )


class IllegalTransition(LifecycleError):
    code = "ILLEGAL_TRANSITION"

    def __init__(self, from_state: str, to_state: str, message: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            message or f"Invalid status transition: {from_state} -> {to_state}"
        )

    def payload(self) -> dict:
        return {"from_state": self.from_state, "to_state": self.to_state}


class MissingSignatures(LifecycleError):
    code = "MISSING_SIGNATURES"

    def __init__(self, roles: Iterable[str], message: str = ""):
        self.roles = sorted(set(roles))
        super().__init__(
            message or f"Missing required signatures: {', '.join(self.roles)}"
        )

    def payload(self) -> dict:
        return {"roles": list(self.roles)}


class DuplicateSignature(LifecycleError):
    code = "DUPLICATE_SIGNATURE"
    http_status = 409

    def __init__(self, role: str, message: str = ""):
        self.role = role
        super().__init__(message or f"Signature for '{role}' already exists.")


class InvalidSignatureFormat(LifecycleError):
    code = "INVALID_SIGNATURE_FORMAT"

    def default_message(self) -> str:
        return "Invalid signature format."


class InvalidSignerRole(LifecycleError):
    code = "INVALID_SIGNER_ROLE"

    def __init__(self, kind: str, role: str, message: str = ""):
        self.kind = kind
        self.role = role
        super().__init__(message or f"Invalid signer role '{role}' for {kind}.")


class InsufficientStock(LifecycleError):
    code = "INSUFFICIENT_STOCK"
    http_status = 409

    def __init__(self, available: int, requested: int, message: str = ""):
        self.available = int(available)
        self.requested = int(requested)
        super().__init__(
            message
            or f"Insufficient stock. Available: {self.available}, requested: {self.requested}"
        )

    def payload(self) -> dict:
        return {"available": self.available, "requested": self.requested}


class ConcurrentModification(LifecycleError):
    code = "CONCURRENT_MODIFICATION"
    http_status = 409

    def default_message(self) -> str:
        return "Document was modified concurrently. Reload and retry."


class SideEffectFailed(LifecycleError):
    """A dispatcher rejected the instruction; the transition is rolled back."""

    code = "SIDE_EFFECT_FAILED"

    def default_message(self) -> str:
        return "Side effects could not be applied."


# =========================================================
# ADAPTER-LEVEL INPUT ERRORS
# =========================================================
class RegistrationError(LifecycleError):
    code = "REGISTRATION_ERROR"


class TransferError(RegistrationError):
    code = "TRANSFER_ERROR"


class FolioError(LifecycleError):
    code = "FOLIO_ERROR"
