# transfers/models/transfer.py

from django.db import models

from documents.choices import DocumentKind
from documents.domain import Document
from documents.models import LifecycleDocument


class Transfer(LifecycleDocument):
    """
    Stock moving between two locations: pending -> completed | cancelled.

    GUARANTEES:
    - from_location != to_location
    - Completion moves stock out of the source and into the destination
      as one unit, exactly once
    - Cancellation moves no stock; the reason is stored with the state change
    """

    document_kind = DocumentKind.TRANSFER

    product = models.ForeignKey(
        "inventory.Product", on_delete=models.PROTECT, related_name="transfers"
    )
    from_location = models.ForeignKey(
        "inventory.Location", on_delete=models.PROTECT, related_name="transfers_out"
    )
    to_location = models.ForeignKey(
        "inventory.Location", on_delete=models.PROTECT, related_name="transfers_in"
    )

    cancel_reason = models.CharField(max_length=255, blank=True, default="")

    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta(LifecycleDocument.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "folio"],
                name="uniq_transfer_folio_per_tenant",
            ),
        ]

    def to_document(self) -> Document:
        return Document(
            id=self.id,
            kind=DocumentKind.TRANSFER,
            state=self.status,
            tenant_id=self.tenant_id,
            folio=self.folio,
            product_id=self.product_id,
            quantity=int(self.quantity),
            side_effects_applied=self.side_effects_applied,
            location_id=self.from_location_id,
            to_location_id=self.to_location_id,
            notes=self.notes,
        )
