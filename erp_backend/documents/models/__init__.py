from .base import LifecycleDocument
from .folio import FolioSequence
from .signature import DocumentSignature
from .transition import DocumentTransition

__all__ = [
    "LifecycleDocument",
    "FolioSequence",
    "DocumentSignature",
    "DocumentTransition",
]
