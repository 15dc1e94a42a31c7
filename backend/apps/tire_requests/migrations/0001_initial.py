# TireRequest: approval workflow submissions with inline base64 photos.

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
            name="TireRequest",
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
                ("status", models.CharField(default="SUBMITTED", max_length=32)),
                ("vehicle_no", models.CharField(max_length=32)),
                ("vehicle_type", models.CharField(blank=True, default="", max_length=100)),
                ("vehicle_brand", models.CharField(blank=True, default="", max_length=100)),
                ("vehicle_model", models.CharField(blank=True, default="", max_length=100)),
                ("user_section", models.CharField(blank=True, default="", max_length=100)),
                ("replacement_date", models.DateField(blank=True, null=True)),
                ("existing_make", models.CharField(blank=True, default="", max_length=100)),
                ("tire_size", models.CharField(blank=True, default="", max_length=50)),
                ("no_of_tires", models.IntegerField(blank=True, null=True)),
                ("no_of_tubes", models.IntegerField(blank=True, null=True)),
                ("cost_center", models.CharField(blank=True, default="", max_length=50)),
                ("present_km", models.CharField(blank=True, default="", max_length=50)),
                ("previous_km", models.CharField(blank=True, default="", max_length=50)),
                ("wear_indicator", models.CharField(blank=True, default="", max_length=100)),
                ("wear_pattern", models.CharField(blank=True, default="", max_length=100)),
                (
                    "officer_service_no",
                    models.CharField(blank=True, default="", max_length=50),
                ),
                ("email", models.CharField(blank=True, default="", max_length=254)),
                ("comments", models.TextField(blank=True, default="")),
                ("photo_urls", models.JSONField(blank=True, default=list)),
                ("legacy_photo_urls", models.JSONField(blank=True, default=list)),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("manager_approved_at", models.DateTimeField(blank=True, null=True)),
                ("manager_rejected_at", models.DateTimeField(blank=True, null=True)),
                ("tto_approved_at", models.DateTimeField(blank=True, null=True)),
                ("tto_rejected_at", models.DateTimeField(blank=True, null=True)),
                ("engineer_approved_at", models.DateTimeField(blank=True, null=True)),
                ("engineer_rejected_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("version", models.PositiveIntegerField(default=1)),
                (
                    "submitted_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tire_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "tire_requests",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_tire_req_status"),
                    models.Index(fields=["created_at"], name="idx_tire_req_created"),
                    models.Index(fields=["vehicle_no"], name="idx_tire_req_vehicle"),
                ],
            },
        ),
    ]
