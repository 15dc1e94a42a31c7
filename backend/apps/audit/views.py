"""
Audit log views - query audit log entries.

Read-only - audit logs are append-only.
"""

from uuid import UUID

from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import LimitOffsetPagination
from django.utils.dateparse import parse_datetime
from core.exceptions import ValidationError
from core.permissions import IsAuthenticatedUser
from apps.audit.models import AuditLog
from apps.audit.serializers import AuditLogSerializer
from apps.audit.services import ENTITY_TYPES


def _parse_uuid(value, name):
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {name} format")


def _parse_timestamp(value, name):
    try:
        parsed = parse_datetime(value)
    except (ValueError, TypeError):
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid {name} format (use ISO 8601)")
    return parsed


@api_view(["GET"])
@permission_classes([IsAuthenticatedUser])
def query_audit_log(request):
    """
    GET /api/audit/

    Query audit log entries with optional filters:
    entityType, entityId, actorId, fromDate, toDate.
    """
    params = request.query_params
    queryset = AuditLog.objects.select_related("actor")

    entity_type = params.get("entityType")
    if entity_type:
        if entity_type not in ENTITY_TYPES:
            raise ValidationError(
                "Invalid entityType", {"allowed": list(ENTITY_TYPES)}
            )
        queryset = queryset.filter(entity_type=entity_type)

    if params.get("entityId"):
        queryset = queryset.filter(
            entity_id=_parse_uuid(params["entityId"], "entityId")
        )

    if params.get("actorId"):
        queryset = queryset.filter(actor_id=_parse_uuid(params["actorId"], "actorId"))

    if params.get("fromDate"):
        queryset = queryset.filter(
            occurred_at__gte=_parse_timestamp(params["fromDate"], "fromDate")
        )

    if params.get("toDate"):
        queryset = queryset.filter(
            occurred_at__lte=_parse_timestamp(params["toDate"], "toDate")
        )

    paginator = LimitOffsetPagination()
    paginator.default_limit = 50
    paginator.max_limit = 100

    page = paginator.paginate_queryset(queryset.order_by("-occurred_at"), request)
    serializer = AuditLogSerializer(page, many=True)

    return paginator.get_paginated_response(serializer.data)
