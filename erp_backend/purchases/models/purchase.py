# purchases/models/purchase.py

from decimal import Decimal

from django.db import models

from documents.choices import DocumentKind, PurchaseType
from documents.domain import Document
from documents.models import LifecycleDocument


class Purchase(LifecycleDocument):
    """
    A purchase trip moving dispatched -> loading -> returning -> completed.

    GUARANTEES:
    - Created ONLY via purchases.services.purchase_service.register_purchase
    - Status changes ONLY via the lifecycle engine
    - Completion requires encargado + proveedor signatures
      (plus conductor for parcela purchases)
    - Stock enters the destination location exactly once, on completion
    """

    document_kind = DocumentKind.PURCHASE

    provider = models.ForeignKey(
        "purchases.Provider",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchases",
    )
    product = models.ForeignKey(
        "inventory.Product", on_delete=models.PROTECT, related_name="purchases"
    )
    location = models.ForeignKey(
        "inventory.Location",
        on_delete=models.PROTECT,
        related_name="purchases",
        help_text="Location the goods are received into",
    )

    purchase_type = models.CharField(
        max_length=10,
        choices=PurchaseType.choices,
        default=PurchaseType.PLANTA,
    )

    unit_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    vehicle = models.CharField(max_length=100, blank=True, default="")
    driver_name = models.CharField(max_length=150, blank=True, default="")

    # stage timestamps (stamped by the lifecycle store)
    loading_time = models.DateTimeField(null=True, blank=True)
    return_time = models.DateTimeField(null=True, blank=True)
    completion_time = models.DateTimeField(null=True, blank=True)

    class Meta(LifecycleDocument.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "folio"],
                name="uniq_purchase_folio_per_tenant",
            ),
        ]

    def to_document(self) -> Document:
        return Document(
            id=self.id,
            kind=DocumentKind.PURCHASE,
            state=self.status,
            tenant_id=self.tenant_id,
            folio=self.folio,
            product_id=self.product_id,
            quantity=int(self.quantity),
            side_effects_applied=self.side_effects_applied,
            location_id=self.location_id,
            unit_price=self.unit_price,
            total_amount=self.total_amount,
            purchase_type=self.purchase_type,
            notes=self.notes,
        )
