"""
Tire request services - all mutations flow through this layer.

Rules:
- All mutations wrapped in transaction.atomic
- Use select_for_update for row-level locking
- Writes are version-locked (ConflictError on concurrent modification)
- Create audit entries for all mutations
- Notifications are sent after the transaction commits; a failed
  notification never undoes the change
- No direct model.save() from views
"""

import logging

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.middleware import get_current_request_id
from apps.audit.services import ENTITY_TIRE_REQUEST, create_audit_entry
from apps.notifications.dispatcher import get_dispatcher
from apps.notifications.messages import NotificationStage
from apps.tire_requests import state_machine
from apps.tire_requests.models import TireRequest
from apps.tire_requests.photos import (
    consolidate,
    encode_uploads,
    normalize_photos,
    partition_photos,
)
from apps.tire_requests.state_machine import ACTIONS, check_transition
from apps.tire_requests.validation import (
    TireRequestDraft,
    auto_populate,
    validate,
    validate_images,
)
from apps.tire_requests.versioning import version_locked_update
from apps.users.services import profile_defaults

logger = logging.getLogger(__name__)

PHOTO_KEYS = ("photoUrls", "tirePhotoUrls")
REASON_REQUIRED = "Rejection reason is required"


def _log(message, operation, entity_id, level=logging.INFO, **extra):
    logger.log(
        level,
        message,
        extra={
            "operation": operation,
            "entity_id": str(entity_id),
            "request_id": get_current_request_id(),
            **extra,
        },
    )


def _snapshot(obj):
    return {
        "status": obj.status,
        "rejection_reason": obj.rejection_reason,
        "version": obj.version,
    }


def _actor_id(user):
    if user is not None and getattr(user, "is_authenticated", False):
        return user.id
    return None


def _notify(stage, record, recipient=None, **context):
    """Dispatch a notification; misconfiguration is logged like any failure."""
    try:
        dispatcher = get_dispatcher()
    except (ValueError, KeyError, AttributeError):
        _log(
            "notification_dispatcher_unavailable",
            "NOTIFY",
            record.id,
            level=logging.ERROR,
            stage=NotificationStage(stage).value,
        )
        return False
    return dispatcher.notify(stage, record, recipient=recipient, **context)


def _get(request_id):
    try:
        return TireRequest.objects.get(id=request_id)
    except TireRequest.DoesNotExist:
        raise NotFoundError(f"TireRequest {request_id} does not exist")


def _get_for_update(request_id):
    try:
        return TireRequest.objects.select_for_update().get(id=request_id)
    except TireRequest.DoesNotExist:
        raise NotFoundError(f"TireRequest {request_id} does not exist")


def _body_photos(data):
    """
    Photo lists given explicitly in the body, or None when neither key is
    present. Accepts both the canonical and the legacy wire name.
    """
    present = [key for key in PHOTO_KEYS if key in data]
    if not present:
        return None
    lists = []
    for key in PHOTO_KEYS:
        if hasattr(data, "getlist"):
            values = data.getlist(key)
        else:
            values = data.get(key)
        if isinstance(values, str):
            values = [values]
        lists.append([v for v in (values or []) if isinstance(v, str) and v])
    return consolidate(*lists)


def _check_expected_version(obj, data):
    expected = data.get("version") if hasattr(data, "get") else None
    if expected in (None, ""):
        return
    try:
        expected = int(expected)
    except (TypeError, ValueError):
        raise ValidationError("version must be an integer")
    if expected != obj.version:
        raise ConflictError(
            "TireRequest was modified by another request; reload and retry.",
            {"expected_version": expected, "current_version": obj.version},
        )


def _raise_if_invalid(errors):
    if errors:
        raise ValidationError.from_errors(errors, "Validation failed")


def create_request(data, files=None, user=None):
    """
    Create a TireRequest with status SUBMITTED and notify the manager.

    Args:
        data: submitted fields (wire names), may include photo lists
        files: uploaded photo files
        user: submitting user; their profile fills blank registered fields

    Raises:
        ValidationError: with every violated rule in details["errors"]
    """
    draft = auto_populate(TireRequestDraft.from_data(data), profile_defaults(user))
    _raise_if_invalid(validate(draft) + validate_images(files))

    photos = consolidate(_body_photos(data), encode_uploads(files))

    with transaction.atomic():
        obj = TireRequest.objects.create(
            **draft.to_model_fields(),
            status=state_machine.SUBMITTED,
            photo_urls=photos,
            legacy_photo_urls=list(photos),
            submitted_by_id=_actor_id(user),
        )
        create_audit_entry(
            event_type="TIRE_REQUEST_CREATED",
            actor_id=_actor_id(user),
            entity_type=ENTITY_TIRE_REQUEST,
            entity_id=obj.id,
            previous_state=None,
            new_state={
                "status": obj.status,
                "vehicle_no": obj.vehicle_no,
                "photo_count": len(photos),
            },
        )

    _log("tire_request_created", "CREATE_TIRE_REQUEST", obj.id, photo_count=len(photos))
    _notify(NotificationStage.MANAGER_REVIEW, obj)
    return obj


def update_request(request_id, data, files=None, user=None):
    """
    Merge submitted fields into a TireRequest and revalidate.

    Photo lists given in the body replace the stored list; uploaded files
    are appended. An optional `version` in the body must match the stored
    version.
    """
    incoming = TireRequestDraft.from_data(data)
    provided = TireRequestDraft.provided_fields(data)
    body_photos = _body_photos(data)

    with transaction.atomic():
        obj = _get_for_update(request_id)
        _check_expected_version(obj, data)

        draft = TireRequestDraft.from_instance(obj).merged(incoming, provided)
        draft = auto_populate(draft, profile_defaults(user))
        _raise_if_invalid(validate(draft) + validate_images(files))

        if body_photos is not None:
            photos = body_photos
        else:
            photos = consolidate(obj.photo_urls, obj.legacy_photo_urls)
        photos = consolidate(photos, encode_uploads(files))

        previous = _snapshot(obj)
        version_locked_update(
            TireRequest.objects.filter(id=obj.id),
            obj.version,
            **draft.to_model_fields(),
            photo_urls=photos,
            legacy_photo_urls=list(photos),
        )
        obj.refresh_from_db()

        create_audit_entry(
            event_type="TIRE_REQUEST_UPDATED",
            actor_id=_actor_id(user),
            entity_type=ENTITY_TIRE_REQUEST,
            entity_id=obj.id,
            previous_state=previous,
            new_state={
                **_snapshot(obj),
                "fields": sorted(provided),
                "photo_count": len(photos),
            },
        )

    _log("tire_request_updated", "UPDATE_TIRE_REQUEST", obj.id)
    return obj


def get_request(request_id):
    """
    Fetch a TireRequest with consolidated photos.

    When the two stored photo fields disagree, the consolidated list is
    written back (photo fields only, version untouched).
    """
    obj = _get(request_id)
    if normalize_photos(obj):
        TireRequest.objects.filter(id=obj.id).update(
            photo_urls=obj.photo_urls, legacy_photo_urls=obj.legacy_photo_urls
        )
        _log(
            "tire_request_photos_normalized",
            "NORMALIZE_PHOTOS",
            obj.id,
            photo_count=len(obj.photo_urls),
        )
    return obj


def get_photos(request_id):
    return get_request(request_id).photo_urls


def delete_request(request_id, user=None):
    with transaction.atomic():
        obj = _get_for_update(request_id)
        create_audit_entry(
            event_type="TIRE_REQUEST_DELETED",
            actor_id=_actor_id(user),
            entity_type=ENTITY_TIRE_REQUEST,
            entity_id=obj.id,
            previous_state={**_snapshot(obj), "vehicle_no": obj.vehicle_no},
            new_state=None,
        )
        obj.delete()

    _log("tire_request_deleted", "DELETE_TIRE_REQUEST", request_id)


def list_requests(statuses=None):
    queryset = TireRequest.objects.all().order_by("-created_at")
    if statuses:
        queryset = queryset.filter(status__in=list(statuses))
    return queryset


def dashboard_requests(stage):
    """Requests shown on the manager, tto or engineer dashboard."""
    try:
        statuses = state_machine.DASHBOARD_STATUSES[stage]
    except KeyError:
        raise ValidationError(
            f"Unknown dashboard stage: {stage}",
            {"allowed": sorted(state_machine.DASHBOARD_STATUSES)},
        )
    return list_requests(statuses)


def dashboard_counts():
    by_status = {
        row["status"]: row["count"]
        for row in TireRequest.objects.values("status").annotate(count=Count("id"))
    }

    def total(statuses):
        return sum(by_status.get(status, 0) for status in statuses)

    return {
        "managerRequests": total(state_machine.DASHBOARD_STATUSES["manager"]),
        "ttoRequests": total(state_machine.DASHBOARD_STATUSES["tto"]),
        "engineerRequests": total(state_machine.DASHBOARD_STATUSES["engineer"]),
        "totalRequests": sum(by_status.values()),
        "byStatus": by_status,
        "timestamp": timezone.now().isoformat(),
    }


def validate_only(data, user=None):
    """Dry-run: auto-populate and validate without persisting."""
    draft = auto_populate(TireRequestDraft.from_data(data), profile_defaults(user))
    errors = validate(draft)
    return {"valid": not errors, "errors": errors, "data": draft.to_wire()}


def clean_photos(request_id, user=None):
    """
    Drop photos that are not valid base64 images and report the counts.
    """
    with transaction.atomic():
        obj = _get_for_update(request_id)
        photos = consolidate(obj.photo_urls, obj.legacy_photo_urls)
        valid, corrupted = partition_photos(photos)

        if valid != obj.photo_urls or valid != obj.legacy_photo_urls:
            version_locked_update(
                TireRequest.objects.filter(id=obj.id),
                obj.version,
                photo_urls=valid,
                legacy_photo_urls=list(valid),
            )
            create_audit_entry(
                event_type="TIRE_REQUEST_PHOTOS_CLEANED",
                actor_id=_actor_id(user),
                entity_type=ENTITY_TIRE_REQUEST,
                entity_id=obj.id,
                previous_state={"photo_count": len(photos)},
                new_state={
                    "photo_count": len(valid),
                    "corrupted_removed": len(corrupted),
                },
            )

    _log(
        "tire_request_photos_cleaned",
        "CLEAN_PHOTOS",
        request_id,
        corrupted_removed=len(corrupted),
    )
    return {
        "requestId": str(request_id),
        "totalPhotos": len(photos),
        "validPhotos": len(valid),
        "corruptedPhotosRemoved": len(corrupted),
        "corruptedPreviews": corrupted,
    }


def _transition(action_name, request_id, actor_id=None, reason=None):
    """
    Read, guard, write (version-locked) and audit one workflow decision.
    """
    action = ACTIONS[action_name]
    reason = (reason or "").strip() or None
    if action.requires_reason and not reason:
        raise ValidationError(REASON_REQUIRED, {"errors": [REASON_REQUIRED]})

    with transaction.atomic():
        obj = _get_for_update(request_id)
        previous = _snapshot(obj)
        check_transition(action_name, obj.id, obj.status)

        version_locked_update(
            TireRequest.objects.filter(id=obj.id),
            obj.version,
            status=action.target,
            rejection_reason=reason if action.keeps_reason else None,
            **{action.timestamp_field: timezone.now()},
        )
        obj.refresh_from_db()

        create_audit_entry(
            event_type=f"TIRE_REQUEST_{action.target}",
            actor_id=actor_id,
            entity_type=ENTITY_TIRE_REQUEST,
            entity_id=obj.id,
            previous_state=previous,
            new_state=_snapshot(obj),
        )

    _log(
        f"tire_request_{action.target.lower()}",
        action_name.upper(),
        obj.id,
        previous_status=previous["status"],
    )
    return obj


def manager_approve(request_id, actor_id=None):
    """SUBMITTED -> MANAGER_APPROVED; notifies the TTO."""
    obj = _transition("manager_approve", request_id, actor_id)
    _notify(NotificationStage.TTO_REVIEW, obj)
    return obj


def manager_reject(request_id, reason, actor_id=None):
    """-> MANAGER_REJECTED with a mandatory reason. No notification."""
    return _transition("manager_reject", request_id, actor_id, reason)


def tto_approve(request_id, actor_id=None):
    """-> TTO_APPROVED; notifies the engineer."""
    obj = _transition("tto_approve", request_id, actor_id)
    _notify(NotificationStage.ENGINEER_REVIEW, obj)
    return obj


def tto_reject(request_id, reason, actor_id=None):
    """
    MANAGER_APPROVED (or historic APPROVED) -> TTO_REJECTED.

    Raises:
        InvalidStateError: "Request must be approved by manager first"
    """
    return _transition("tto_reject", request_id, actor_id, reason)


def engineer_approve(request_id, actor_id=None):
    """-> ENGINEER_APPROVED; tells the submitter they can order tires."""
    obj = _transition("engineer_approve", request_id, actor_id)
    recipient = obj.email or (obj.submitted_by.email if obj.submitted_by else None)
    _notify(NotificationStage.REQUEST_APPROVED, obj, recipient=recipient)
    return obj


def engineer_reject(request_id, reason=None, actor_id=None):
    return _transition("engineer_reject", request_id, actor_id, reason)


def request_pdf(request_id):
    from apps.tire_requests.pdf import render_request_pdf

    obj = get_request(request_id)
    return render_request_pdf(obj), f"tire_request_{obj.id}.pdf"
