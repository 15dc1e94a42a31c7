"""
Serializers for AuditLog model.

actorName is resolved at read time; entries whose actor was removed
report None.
"""

from rest_framework import serializers
from apps.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(read_only=True)
    eventType = serializers.CharField(source="event_type", read_only=True)
    actorId = serializers.UUIDField(source="actor_id", read_only=True, allow_null=True)
    actorName = serializers.SerializerMethodField()
    entityType = serializers.CharField(source="entity_type", read_only=True)
    entityId = serializers.UUIDField(source="entity_id", read_only=True)
    requestId = serializers.CharField(
        source="request_id", read_only=True, allow_null=True
    )
    previousState = serializers.JSONField(
        source="previous_state", read_only=True, allow_null=True
    )
    newState = serializers.JSONField(
        source="new_state", read_only=True, allow_null=True
    )
    occurredAt = serializers.DateTimeField(source="occurred_at", read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "eventType",
            "actorId",
            "actorName",
            "entityType",
            "entityId",
            "requestId",
            "previousState",
            "newState",
            "occurredAt",
        ]
        read_only_fields = fields

    def get_actorName(self, obj):
        if obj.actor is None:
            return None
        return obj.actor.display_name or obj.actor.username
