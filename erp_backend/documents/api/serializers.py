# documents/api/serializers.py

from rest_framework import serializers

from documents.choices import SignerRole


class TransitionInputSerializer(serializers.Serializer):
    status = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class SignatureInputSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=SignerRole.choices)
    image = serializers.CharField(trim_whitespace=True)
    location = serializers.JSONField(required=False, allow_null=True, default=None)
    face_auth_data = serializers.JSONField(required=False, allow_null=True, default=None)


class SignatureRecordSerializer(serializers.Serializer):
    role = serializers.CharField()
    image_data = serializers.CharField()
    captured_at = serializers.DateTimeField()
    captured_by = serializers.CharField(source="captured_by_id", allow_null=True)
    location = serializers.JSONField(allow_null=True)


class TransitionRecordSerializer(serializers.Serializer):
    from_state = serializers.CharField()
    to_state = serializers.CharField()
    timestamp = serializers.DateTimeField()
    performed_by = serializers.CharField(source="performed_by_id", allow_null=True)
    notes = serializers.CharField(allow_blank=True)
