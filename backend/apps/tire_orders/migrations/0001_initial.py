# TireOrder: one order per fully approved tire request.

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="TireOrder",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("request_id", models.UUIDField(unique=True)),
                ("vendor_name", models.CharField(blank=True, default="", max_length=255)),
                ("vendor_email", models.CharField(blank=True, default="", max_length=254)),
                ("vehicle_no", models.CharField(blank=True, default="", max_length=32)),
                ("tire_brand", models.CharField(blank=True, default="", max_length=100)),
                ("tire_size", models.CharField(blank=True, default="", max_length=50)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("user_email", models.CharField(blank=True, default="", max_length=254)),
                ("delivery_address", models.TextField(blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=1)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tire_orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "tire_orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_tire_order_status"),
                    models.Index(fields=["vendor_email"], name="idx_tire_order_vendor"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)),
                        name="tire_order_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("status__in", ["pending", "confirmed", "rejected"])
                        ),
                        name="tire_order_valid_status",
                    ),
                ],
            },
        ),
    ]
