from django.contrib import admin

from documents.models import DocumentSignature, DocumentTransition, FolioSequence


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DocumentSignature)
class DocumentSignatureAdmin(ReadOnlyAdmin):
    list_display = ("document_kind", "document_id", "role", "tenant_id", "captured_at")
    list_filter = ("document_kind", "role")
    exclude = ("image_data",)


@admin.register(DocumentTransition)
class DocumentTransitionAdmin(ReadOnlyAdmin):
    list_display = (
        "document_kind",
        "document_id",
        "from_state",
        "to_state",
        "performed_by",
        "created_at",
    )
    list_filter = ("document_kind", "to_state")


@admin.register(FolioSequence)
class FolioSequenceAdmin(ReadOnlyAdmin):
    list_display = ("tenant_id", "prefix", "current_number", "updated_at")
