"""
Audit service - creates immutable audit log entries.

All audit entries are append-only. No updates or deletions.
"""

from apps.audit.models import AuditLog
from core.middleware import get_current_request_id

ENTITY_TIRE_REQUEST = "TireRequest"
ENTITY_TIRE_ORDER = "TireOrder"
ENTITY_TYPES = (ENTITY_TIRE_REQUEST, ENTITY_TIRE_ORDER)


def create_audit_entry(
    event_type, actor_id, entity_type, entity_id, previous_state=None, new_state=None
):
    """
    Create an audit log entry.

    Args:
        event_type: Event classification (e.g. 'TIRE_REQUEST_CREATED')
        actor_id: User identifier (None for anonymous or system events)
        entity_type: 'TireRequest' or 'TireOrder'
        entity_id: Identifier of affected entity
        previous_state: Serialized state before change (optional)
        new_state: Serialized state after change (optional)

    Returns:
        AuditLog: Created audit log entry, tagged with the current request id
    """
    from apps.users.models import User

    actor = None
    if actor_id:
        # A deleted actor is still logged, just without the reference.
        actor = User.objects.filter(id=actor_id).first()

    return AuditLog.objects.create(
        event_type=event_type,
        actor=actor,
        entity_type=entity_type,
        entity_id=entity_id,
        request_id=get_current_request_id(),
        previous_state=previous_state,
        new_state=new_state,
    )
