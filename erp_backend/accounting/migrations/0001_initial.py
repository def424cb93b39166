import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CashFlowEntry",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("tenant_id", models.CharField(db_index=True, max_length=64)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Signed value: positive for ingreso, negative for egreso",
                        max_digits=14,
                    ),
                ),
                (
                    "movement_type",
                    models.CharField(
                        choices=[("ingreso", "Ingreso"), ("egreso", "Egreso")], max_length=10
                    ),
                ),
                (
                    "source_type",
                    models.CharField(
                        choices=[("venta", "Venta"), ("compra", "Compra")], max_length=10
                    ),
                ),
                ("reference_type", models.CharField(max_length=20)),
                ("reference_id", models.UUIDField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cash_flow_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Cash Flow Entry",
                "verbose_name_plural": "Cash Flow Entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["tenant_id", "created_at"], name="accounting_c_tenant_idx"
                    ),
                    models.Index(
                        fields=["reference_type", "reference_id"], name="accounting_c_ref_idx"
                    ),
                ],
            },
        ),
    ]
