"""
Serializers for User model.

No business logic in serializers - validation only.
"""

from rest_framework import serializers
from apps.users.models import User, Role


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model."""

    id = serializers.UUIDField(read_only=True)
    role = serializers.ChoiceField(choices=Role.choices, read_only=True)
    displayName = serializers.CharField(source="display_name", read_only=True)
    serviceNumber = serializers.CharField(source="service_number", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "displayName",
            "email",
            "role",
            "section",
            "serviceNumber",
        ]
        read_only_fields = fields


class UserCreateSerializer(serializers.Serializer):
    """Serializer for user creation endpoint."""

    username = serializers.CharField(max_length=150, required=True)
    password = serializers.CharField(write_only=True, required=True)
    displayName = serializers.CharField(
        max_length=255, required=False, source="display_name"
    )
    email = serializers.EmailField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=Role.choices, required=True)
    section = serializers.CharField(max_length=100, required=False, allow_blank=True)
    serviceNumber = serializers.CharField(
        max_length=50, required=False, allow_blank=True, source="service_number"
    )

    def validate_role(self, value):
        if value == Role.ADMIN:
            raise serializers.ValidationError("Cannot create ADMIN users via API")
        return value
