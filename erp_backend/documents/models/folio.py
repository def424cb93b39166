# documents/models/folio.py

from django.db import models


class FolioSequence(models.Model):
    """
    Per-tenant, per-prefix counter behind human-readable folios.

    Incremented only by documents.services.folio.next_folio under row lock.
    """

    tenant_id = models.CharField(max_length=64)
    prefix = models.CharField(max_length=8)
    current_number = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "prefix"],
                name="uniq_folio_sequence_tenant_prefix",
            ),
        ]

    def __str__(self):
        return f"{self.tenant_id}:{self.prefix}={self.current_number}"
