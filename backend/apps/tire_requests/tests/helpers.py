"""Shared fixtures for tire request tests."""

from datetime import date

from django.core.files.uploadedfile import SimpleUploadedFile

from apps.tire_requests.models import TireRequest
from apps.users.models import User

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
PNG_URL = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUg=="
JPEG_URL = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="
GIF_URL = "data:image/gif;base64,R0lGODlhAQA="
WEBP_URL = "data:image/webp;base64,UklGRiQAAABXRUJQVlA4IA=="
TEXT_URL = "data:image/png;base64,aGVsbG8gd29ybGQ="


def make_user(username, role="EMPLOYEE", **extra):
    return User.objects.create_user(
        username=username,
        password="testpass123",
        display_name=username.replace("_", " ").title(),
        role=role,
        **extra,
    )


def make_request(**overrides):
    values = {
        "vehicle_no": "WP-1234",
        "vehicle_type": "Van",
        "vehicle_brand": "Toyota",
        "vehicle_model": "HiAce",
        "user_section": "IT",
        "replacement_date": date(2024, 1, 15),
        "tire_size": "195/70R15",
        "no_of_tires": 4,
        "no_of_tubes": 0,
        "cost_center": "IT-001",
        "officer_service_no": "SVC-0042",
        "email": "driver@company.com",
        "status": "SUBMITTED",
    }
    values.update(overrides)
    return TireRequest.objects.create(**values)


def valid_payload(**overrides):
    payload = {
        "vehicleNo": "WP-1234",
        "vehicleType": "Van",
        "vehicleBrand": "Toyota",
        "vehicleModel": "HiAce",
        "userSection": "IT",
        "replacementDate": "2024-01-15",
        "existingMake": "Bridgestone",
        "tireSize": "195/70R15",
        "noOfTires": "4",
        "noOfTubes": "0",
        "presentKm": "120000",
        "previousKm": "80000",
        "wearIndicator": "Yes",
        "wearPattern": "Even",
        "comments": "Front tires worn",
    }
    payload.update(overrides)
    return payload


def png_upload(name="front.png"):
    return SimpleUploadedFile(name, PNG_BYTES, content_type="image/png")
