"""
Version locking helper for TireRequest and TireOrder writes.
Prevents concurrent modification corruption (compare-and-swap on `version`).
"""
from django.db.models import F
from django.utils import timezone

from core.exceptions import ConflictError


def version_locked_update(queryset, current_version, **updates):
    """
    Perform version-locked update on queryset.

    Args:
        queryset: QuerySet narrowed to the row being written
        current_version: Version number read before the change
        **updates: Fields to update (updated_at is stamped automatically)

    Returns:
        int: Number of rows updated (always 1)

    Raises:
        ConflictError: If the row changed since it was read
    """
    updates.setdefault("updated_at", timezone.now())
    updated_count = queryset.filter(version=current_version).update(
        **updates,
        version=F("version") + 1,
    )

    if updated_count == 0:
        raise ConflictError(
            "Concurrent modification detected. The record was changed by "
            "another request; reload and retry.",
            {"expected_version": current_version},
        )

    return updated_count
