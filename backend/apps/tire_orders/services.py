"""
Tire order services.

An order is a projection of a fully approved tire request. Status moves
pending -> confirmed | rejected, guarded by
apps.tire_requests.state_machine.validate_order_transition.
Notifications are sent after the transaction commits.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import InvalidStateError, NotFoundError, ValidationError
from core.middleware import get_current_request_id
from apps.audit.services import ENTITY_TIRE_ORDER, create_audit_entry
from apps.notifications.dispatcher import get_dispatcher
from apps.notifications.messages import NotificationStage
from apps.tire_orders.models import TireOrder
from apps.tire_requests import state_machine
from apps.tire_requests.models import TireRequest
from apps.tire_requests.versioning import version_locked_update

logger = logging.getLogger(__name__)

# Fields a client may change while the order is pending.
EDITABLE_FIELDS = (
    "vendor_name",
    "vendor_email",
    "tire_brand",
    "tire_size",
    "quantity",
    "delivery_address",
    "notes",
)


def _log(message, operation, entity_id, **extra):
    logger.info(
        message,
        extra={
            "operation": operation,
            "entity_id": str(entity_id),
            "request_id": get_current_request_id(),
            **extra,
        },
    )


def _snapshot(order):
    return {"status": order.status, "version": order.version}


def _notify(stage, order, recipient=None, **context):
    try:
        dispatcher = get_dispatcher()
    except (ValueError, KeyError, AttributeError):
        logger.exception(
            "notification_dispatcher_unavailable",
            extra={"operation": "NOTIFY", "entity_id": str(order.id)},
        )
        return False
    return dispatcher.notify(stage, order, recipient=recipient, **context)


def _get_for_update(order_id):
    try:
        return TireOrder.objects.select_for_update().get(id=order_id)
    except TireOrder.DoesNotExist:
        raise NotFoundError(f"TireOrder {order_id} does not exist")


def requester_email(order):
    """Email of the requester, falling back to the copy on the order."""
    email = (
        TireRequest.objects.filter(id=order.request_id)
        .values_list("email", flat=True)
        .first()
    )
    return email or order.user_email or None


def get_order(order_id):
    try:
        return TireOrder.objects.get(id=order_id)
    except TireOrder.DoesNotExist:
        raise NotFoundError(f"TireOrder {order_id} does not exist")


def list_orders(vendor_email=None, statuses=None):
    queryset = TireOrder.objects.all().order_by("-created_at")
    if vendor_email:
        queryset = queryset.filter(vendor_email__iexact=vendor_email)
    if statuses:
        queryset = queryset.filter(status__in=list(statuses))
    return queryset


def create_order(request_id, fields, actor_id=None):
    """
    Place the order for a fully approved TireRequest.

    Vehicle number, tire size and requester email are copied from the
    request; quantity defaults to the requested number of tires.

    Raises:
        NotFoundError: request does not exist
        InvalidStateError: request not ENGINEER_APPROVED, or already ordered
    """
    with transaction.atomic():
        try:
            tire_request = TireRequest.objects.select_for_update().get(id=request_id)
        except TireRequest.DoesNotExist:
            raise NotFoundError(f"TireRequest {request_id} does not exist")

        if tire_request.status != state_machine.ENGINEER_APPROVED:
            raise InvalidStateError(
                "Tire request must be approved by the engineer before ordering",
                {"current_status": tire_request.status},
            )
        if TireOrder.objects.filter(request_id=tire_request.id).exists():
            raise InvalidStateError(
                "An order already exists for this tire request",
                {"request_id": str(tire_request.id)},
            )

        values = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
        values.setdefault("tire_size", tire_request.tire_size)
        values.setdefault("quantity", tire_request.no_of_tires or 1)
        try:
            with transaction.atomic():
                order = TireOrder.objects.create(
                    request_id=tire_request.id,
                    vehicle_no=tire_request.vehicle_no,
                    user_email=tire_request.email
                    or (tire_request.submitted_by.email if tire_request.submitted_by else ""),
                    status=state_machine.ORDER_PENDING,
                    created_by_id=actor_id,
                    **values,
                )
        except IntegrityError:
            raise InvalidStateError(
                "An order already exists for this tire request",
                {"request_id": str(tire_request.id)},
            )

        create_audit_entry(
            event_type="TIRE_ORDER_CREATED",
            actor_id=actor_id,
            entity_type=ENTITY_TIRE_ORDER,
            entity_id=order.id,
            previous_state=None,
            new_state={
                "status": order.status,
                "request_id": str(order.request_id),
                "quantity": order.quantity,
            },
        )

    _log("tire_order_created", "CREATE_TIRE_ORDER", order.id, tire_request_id=str(request_id))
    _notify(NotificationStage.SELLER_ORDER, order)
    return order


def update_order(order_id, fields, actor_id=None):
    """Change vendor, tire and delivery fields of a pending order."""
    with transaction.atomic():
        order = _get_for_update(order_id)
        if order.status != state_machine.ORDER_PENDING:
            raise InvalidStateError(
                f"TireOrder in state {order.status} cannot be edited",
                {"current_status": order.status},
            )

        values = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
        if not values:
            return order

        previous = _snapshot(order)
        version_locked_update(
            TireOrder.objects.filter(id=order.id), order.version, **values
        )
        order.refresh_from_db()

        create_audit_entry(
            event_type="TIRE_ORDER_UPDATED",
            actor_id=actor_id,
            entity_type=ENTITY_TIRE_ORDER,
            entity_id=order.id,
            previous_state=previous,
            new_state={**_snapshot(order), "fields": sorted(values)},
        )

    _log("tire_order_updated", "UPDATE_TIRE_ORDER", order.id)
    return order


def _decide(order_id, target, actor_id, reason=None):
    with transaction.atomic():
        order = _get_for_update(order_id)
        state_machine.validate_order_transition(order.status, target)

        previous = _snapshot(order)
        now = timezone.now()
        updates = {"status": target}
        if target == state_machine.ORDER_CONFIRMED:
            updates["confirmed_at"] = now
        else:
            updates["rejected_at"] = now
            updates["rejection_reason"] = reason

        version_locked_update(
            TireOrder.objects.filter(id=order.id), order.version, **updates
        )
        order.refresh_from_db()

        create_audit_entry(
            event_type=f"TIRE_ORDER_{target.upper()}",
            actor_id=actor_id,
            entity_type=ENTITY_TIRE_ORDER,
            entity_id=order.id,
            previous_state=previous,
            new_state=_snapshot(order),
        )

    _log(f"tire_order_{target}", f"{target.upper()}_TIRE_ORDER", order.id)
    return order


def confirm_order(order_id, actor_id=None):
    """pending -> confirmed; notifies the requester."""
    order = _decide(order_id, state_machine.ORDER_CONFIRMED, actor_id)
    _notify(NotificationStage.ORDER_CONFIRMED, order, recipient=requester_email(order))
    return order


def reject_order(order_id, reason, actor_id=None):
    """
    pending -> rejected with a mandatory reason; notifies the requester.

    Raises:
        ValidationError: blank reason
        InvalidStateError: order already confirmed or rejected
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError(
            "Rejection reason is required", {"errors": ["Rejection reason is required"]}
        )

    order = _decide(order_id, state_machine.ORDER_REJECTED, actor_id, reason)
    _notify(
        NotificationStage.ORDER_REJECTED,
        order,
        recipient=requester_email(order),
        reason=reason,
    )
    return order


def delete_order(order_id, actor_id=None):
    with transaction.atomic():
        order = _get_for_update(order_id)
        create_audit_entry(
            event_type="TIRE_ORDER_DELETED",
            actor_id=actor_id,
            entity_type=ENTITY_TIRE_ORDER,
            entity_id=order.id,
            previous_state={**_snapshot(order), "request_id": str(order.request_id)},
            new_state=None,
        )
        order.delete()

    _log("tire_order_deleted", "DELETE_TIRE_ORDER", order_id)
