"""
TireOrder model - placed once a tire request is fully approved.

request_id is a plain UUID, not a foreign key: an order outlives the
deletion of its request.
"""

import uuid
from django.db import models
from django.db.models import Q

from apps.tire_requests import state_machine


class TireOrder(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    request_id = models.UUIDField(unique=True)
    vendor_name = models.CharField(max_length=255, blank=True, default="")
    vendor_email = models.CharField(max_length=254, blank=True, default="")
    vehicle_no = models.CharField(max_length=32, blank=True, default="")
    tire_brand = models.CharField(max_length=100, blank=True, default="")
    tire_size = models.CharField(max_length=50, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    user_email = models.CharField(max_length=254, blank=True, default="")
    delivery_address = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=16,
        choices=state_machine.ORDER_STATUS_CHOICES,
        default=state_machine.ORDER_PENDING,
    )
    rejection_reason = models.TextField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tire_orders",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "tire_orders"
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1), name="tire_order_quantity_positive"
            ),
            models.CheckConstraint(
                condition=Q(status__in=["pending", "confirmed", "rejected"]),
                name="tire_order_valid_status",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="idx_tire_order_status"),
            models.Index(fields=["vendor_email"], name="idx_tire_order_vendor"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"TireOrder {self.id} ({self.vehicle_no}, {self.status})"
