import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


DOCUMENT_KINDS = [
    ("sale", "Sale"),
    ("purchase", "Purchase"),
    ("transfer", "Transfer"),
]

DOCUMENT_STATES = [
    ("pending", "Pending"),
    ("preparing", "Preparing"),
    ("in_transit", "In transit"),
    ("delivered", "Delivered"),
    ("dispatched", "Dispatched"),
    ("loading", "Loading"),
    ("returning", "Returning"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]

SIGNER_ROLES = [
    ("cliente", "Cliente"),
    ("conductor", "Conductor"),
    ("encargado", "Encargado"),
    ("proveedor", "Proveedor"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FolioSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("tenant_id", models.CharField(max_length=64)),
                ("prefix", models.CharField(max_length=8)),
                ("current_number", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant_id", "prefix"),
                        name="uniq_folio_sequence_tenant_prefix",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DocumentSignature",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("document_kind", models.CharField(choices=DOCUMENT_KINDS, max_length=20)),
                ("document_id", models.UUIDField()),
                ("role", models.CharField(choices=SIGNER_ROLES, max_length=20)),
                ("image_data", models.TextField()),
                ("location", models.JSONField(blank=True, null=True)),
                ("face_auth_data", models.JSONField(blank=True, null=True)),
                ("captured_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "captured_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="document_signatures",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["captured_at"],
                "indexes": [
                    models.Index(
                        fields=["document_kind", "document_id"],
                        name="documents_d_documen_sig_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("document_kind", "document_id", "role"),
                        name="uniq_signature_per_document_role",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DocumentTransition",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                ("document_kind", models.CharField(choices=DOCUMENT_KINDS, max_length=20)),
                ("document_id", models.UUIDField()),
                ("from_state", models.CharField(choices=DOCUMENT_STATES, max_length=20)),
                ("to_state", models.CharField(choices=DOCUMENT_STATES, max_length=20)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="document_transitions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["document_kind", "document_id", "created_at"],
                        name="documents_d_documen_trn_idx",
                    )
                ],
            },
        ),
    ]
