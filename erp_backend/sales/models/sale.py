# sales/models/sale.py

from decimal import Decimal

from django.db import models

from documents.choices import DeliveryType, DocumentKind
from documents.domain import Document
from documents.models import LifecycleDocument


class Sale(LifecycleDocument):
    """
    A sale moving pending -> preparing -> in_transit -> delivered.

    GUARANTEES:
    - Created ONLY via sales.services.sale_service.register_sale
    - Status changes ONLY via the lifecycle engine
    - Stock leaves the source location exactly once, on delivery
    """

    document_kind = DocumentKind.SALE

    client = models.ForeignKey(
        "sales.Client",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )
    product = models.ForeignKey(
        "inventory.Product", on_delete=models.PROTECT, related_name="sales"
    )
    location = models.ForeignKey(
        "inventory.Location",
        on_delete=models.PROTECT,
        related_name="sales",
        help_text="Location the goods leave from",
    )

    unit_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    delivery_type = models.CharField(
        max_length=20,
        choices=DeliveryType.choices,
        default=DeliveryType.OWN_FREIGHT,
    )
    vehicle = models.CharField(max_length=100, blank=True, default="")
    driver_name = models.CharField(max_length=150, blank=True, default="")

    # stage timestamps (stamped by the lifecycle store)
    preparation_time = models.DateTimeField(null=True, blank=True)
    transit_time = models.DateTimeField(null=True, blank=True)
    delivery_time = models.DateTimeField(null=True, blank=True)

    class Meta(LifecycleDocument.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "folio"],
                name="uniq_sale_folio_per_tenant",
            ),
        ]

    def to_document(self) -> Document:
        return Document(
            id=self.id,
            kind=DocumentKind.SALE,
            state=self.status,
            tenant_id=self.tenant_id,
            folio=self.folio,
            product_id=self.product_id,
            quantity=int(self.quantity),
            side_effects_applied=self.side_effects_applied,
            location_id=self.location_id,
            unit_price=self.unit_price,
            total_amount=self.total_amount,
            delivery_type=self.delivery_type,
            notes=self.notes,
        )
