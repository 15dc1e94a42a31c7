"""
State machine for TireRequest approval and TireOrder fulfilment.

Request flow: SUBMITTED -> MANAGER_APPROVED -> TTO_APPROVED -> ENGINEER_APPROVED,
with a rejection branch at each stage. Stored data may still carry the
historic aliases PENDING/pending/APPROVED/approved.

Only the TTO rejection is enforced. Manager and TTO approvals on an
unexpected status are logged and allowed; engineer decisions carry no guard,
so an engineer may reverse an earlier engineer decision.
"""

import logging
from dataclasses import dataclass

from core.exceptions import InvalidStateError

logger = logging.getLogger(__name__)

SUBMITTED = "SUBMITTED"
MANAGER_APPROVED = "MANAGER_APPROVED"
MANAGER_REJECTED = "MANAGER_REJECTED"
TTO_APPROVED = "TTO_APPROVED"
TTO_REJECTED = "TTO_REJECTED"
ENGINEER_APPROVED = "ENGINEER_APPROVED"
ENGINEER_REJECTED = "ENGINEER_REJECTED"

STATUS_CHOICES = [
    (SUBMITTED, "Submitted"),
    (MANAGER_APPROVED, "Manager approved"),
    (MANAGER_REJECTED, "Manager rejected"),
    (TTO_APPROVED, "TTO approved"),
    (TTO_REJECTED, "TTO rejected"),
    (ENGINEER_APPROVED, "Engineer approved"),
    (ENGINEER_REJECTED, "Engineer rejected"),
]

LEGACY_SUBMITTED_ALIASES = ("PENDING", "pending", "APPROVED", "approved")
SUBMITTED_EQUIVALENTS = (SUBMITTED,) + LEGACY_SUBMITTED_ALIASES
MANAGER_APPROVED_EQUIVALENTS = (MANAGER_APPROVED, "APPROVED")

TERMINAL_STATES = (
    MANAGER_REJECTED,
    TTO_REJECTED,
    ENGINEER_APPROVED,
    ENGINEER_REJECTED,
)

DASHBOARD_STATUSES = {
    "manager": SUBMITTED_EQUIVALENTS + (MANAGER_APPROVED,),
    "tto": (
        MANAGER_APPROVED,
        TTO_APPROVED,
        TTO_REJECTED,
        ENGINEER_APPROVED,
        ENGINEER_REJECTED,
        "APPROVED",
        "approved",
        "pending",
    ),
    "engineer": (TTO_APPROVED, ENGINEER_APPROVED, ENGINEER_REJECTED),
}


@dataclass(frozen=True)
class Action:
    name: str
    target: str
    expected: tuple = ()
    enforced: bool = False
    message: str = ""
    timestamp_field: str = ""
    requires_reason: bool = False
    keeps_reason: bool = False


ACTIONS = {
    "manager_approve": Action(
        name="manager_approve",
        target=MANAGER_APPROVED,
        expected=SUBMITTED_EQUIVALENTS,
        timestamp_field="manager_approved_at",
    ),
    "manager_reject": Action(
        name="manager_reject",
        target=MANAGER_REJECTED,
        timestamp_field="manager_rejected_at",
        requires_reason=True,
        keeps_reason=True,
    ),
    "tto_approve": Action(
        name="tto_approve",
        target=TTO_APPROVED,
        expected=SUBMITTED_EQUIVALENTS + (MANAGER_APPROVED,),
        timestamp_field="tto_approved_at",
    ),
    "tto_reject": Action(
        name="tto_reject",
        target=TTO_REJECTED,
        expected=MANAGER_APPROVED_EQUIVALENTS,
        enforced=True,
        message="Request must be approved by manager first",
        timestamp_field="tto_rejected_at",
        requires_reason=True,
        keeps_reason=True,
    ),
    "engineer_approve": Action(
        name="engineer_approve",
        target=ENGINEER_APPROVED,
        timestamp_field="engineer_approved_at",
    ),
    "engineer_reject": Action(
        name="engineer_reject",
        target=ENGINEER_REJECTED,
        timestamp_field="engineer_rejected_at",
        keeps_reason=True,
    ),
}


def check_transition(action_name, request_id, current_status):
    """
    Apply the guard of `action_name` to `current_status`.

    Raises:
        InvalidStateError: enforced guard not satisfied

    Returns:
        Action: the action definition
    """
    action = ACTIONS[action_name]
    if not action.expected or current_status in action.expected:
        return action

    if action.enforced:
        raise InvalidStateError(
            action.message,
            {
                "request_id": str(request_id),
                "current_status": current_status,
                "allowed_statuses": list(action.expected),
            },
        )

    logger.warning(
        "tire_request_unexpected_status",
        extra={
            "operation": action_name.upper(),
            "entity_id": str(request_id),
            "current_status": current_status,
            "target_status": action.target,
        },
    )
    return action


def is_terminal_state(status):
    return status in TERMINAL_STATES


# TireOrder
ORDER_PENDING = "pending"
ORDER_CONFIRMED = "confirmed"
ORDER_REJECTED = "rejected"

ORDER_STATUS_CHOICES = [
    (ORDER_PENDING, "Pending"),
    (ORDER_CONFIRMED, "Confirmed"),
    (ORDER_REJECTED, "Rejected"),
]

ORDER_TRANSITIONS = {
    ORDER_PENDING: [ORDER_CONFIRMED, ORDER_REJECTED],
    ORDER_CONFIRMED: [],  # Terminal
    ORDER_REJECTED: [],  # Terminal
}


def validate_order_transition(current_status, target_status):
    """
    Validate a TireOrder status change.

    Raises:
        InvalidStateError: unknown, terminal or disallowed transition
    """
    if current_status not in ORDER_TRANSITIONS:
        raise InvalidStateError(
            f"Invalid current order status: {current_status}",
            {"current_status": current_status},
        )

    allowed_targets = ORDER_TRANSITIONS[current_status]
    if not allowed_targets:
        raise InvalidStateError(
            f"TireOrder in state {current_status} is terminal and cannot transition",
            {"current_status": current_status, "target_status": target_status},
        )

    if target_status not in allowed_targets:
        raise InvalidStateError(
            f"Invalid transition: TireOrder cannot transition from {current_status} "
            f"to {target_status}",
            {
                "current_status": current_status,
                "target_status": target_status,
                "allowed_transitions": allowed_targets,
            },
        )

    return True
