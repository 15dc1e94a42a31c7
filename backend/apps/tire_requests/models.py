"""
TireRequest model - one row per tire replacement submission.

Status is the single source of truth for the workflow position and changes
only through apps.tire_requests.services (version-locked).
"""

import uuid
from django.db import models

from apps.tire_requests import state_machine


class TireRequest(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Historic aliases (PENDING, APPROVED, ...) may be stored; no choices here.
    status = models.CharField(max_length=32, default=state_machine.SUBMITTED)

    vehicle_no = models.CharField(max_length=32)
    vehicle_type = models.CharField(max_length=100, blank=True, default="")
    vehicle_brand = models.CharField(max_length=100, blank=True, default="")
    vehicle_model = models.CharField(max_length=100, blank=True, default="")
    user_section = models.CharField(max_length=100, blank=True, default="")
    replacement_date = models.DateField(null=True, blank=True)
    existing_make = models.CharField(max_length=100, blank=True, default="")
    tire_size = models.CharField(max_length=50, blank=True, default="")
    no_of_tires = models.IntegerField(null=True, blank=True)
    no_of_tubes = models.IntegerField(null=True, blank=True)
    cost_center = models.CharField(max_length=50, blank=True, default="")
    present_km = models.CharField(max_length=50, blank=True, default="")
    previous_km = models.CharField(max_length=50, blank=True, default="")
    wear_indicator = models.CharField(max_length=100, blank=True, default="")
    wear_pattern = models.CharField(max_length=100, blank=True, default="")
    officer_service_no = models.CharField(max_length=50, blank=True, default="")
    email = models.CharField(max_length=254, blank=True, default="")
    comments = models.TextField(blank=True, default="")

    # Base64 data URLs. photo_urls is canonical; legacy_photo_urls mirrors it
    # after normalization and only exists for historic data.
    photo_urls = models.JSONField(default=list, blank=True)
    legacy_photo_urls = models.JSONField(default=list, blank=True)

    rejection_reason = models.TextField(null=True, blank=True)
    manager_approved_at = models.DateTimeField(null=True, blank=True)
    manager_rejected_at = models.DateTimeField(null=True, blank=True)
    tto_approved_at = models.DateTimeField(null=True, blank=True)
    tto_rejected_at = models.DateTimeField(null=True, blank=True)
    engineer_approved_at = models.DateTimeField(null=True, blank=True)
    engineer_rejected_at = models.DateTimeField(null=True, blank=True)

    submitted_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tire_requests",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "tire_requests"
        indexes = [
            models.Index(fields=["status"], name="idx_tire_req_status"),
            models.Index(fields=["created_at"], name="idx_tire_req_created"),
            models.Index(fields=["vehicle_no"], name="idx_tire_req_vehicle"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"TireRequest {self.id} ({self.vehicle_no}, {self.status})"

    @property
    def photo_count(self):
        return len(self.photo_urls or [])
