"""
Tire request validation.

Rules are evaluated all together and reported as a list of messages; an
empty list means the draft is valid. Auto-population fills the registered
fields (cost center, officer service number, email) before validation so
that auto-filled drafts pass the required-field checks.
"""

from __future__ import annotations

import dataclasses
import re
import zlib
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from django.utils import timezone

from core.exceptions import ValidationError

MAX_VEHICLE_NO_LENGTH = 8
MAX_TIRE_QUANTITY = 50
MAX_TUBE_QUANTITY = 50
MAX_COMMENT_LENGTH = 500
MAX_IMAGE_SIZE = 5 * 1024 * 1024

DATE_FORMAT = "%Y-%m-%d"
# Fields kept in their submitted type; every other field is text.
TYPED_FIELDS = ("replacement_date", "no_of_tires", "no_of_tubes")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")

SECTION_COST_CENTERS = {
    "IT": "IT-001",
    "HR": "HR-001",
    "Finance": "FIN-001",
    "Operations": "OPS-001",
}
DEFAULT_COST_CENTER = "GEN-001"
EMAIL_DOMAIN = "company.com"


@dataclass(frozen=True)
class TireRequestDraft:
    """Raw submitted fields of a tire request, before type conversion."""

    vehicle_no: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_brand: Optional[str] = None
    vehicle_model: Optional[str] = None
    user_section: Optional[str] = None
    replacement_date: Any = None
    existing_make: Optional[str] = None
    tire_size: Optional[str] = None
    no_of_tires: Any = None
    no_of_tubes: Any = None
    cost_center: Optional[str] = None
    present_km: Optional[str] = None
    previous_km: Optional[str] = None
    wear_indicator: Optional[str] = None
    wear_pattern: Optional[str] = None
    officer_service_no: Optional[str] = None
    email: Optional[str] = None
    comments: Optional[str] = None

    # Wire name -> field name. Extra aliases come from older client forms.
    WIRE_NAMES = {
        "vehicleNo": "vehicle_no",
        "vehicleNumber": "vehicle_no",
        "vehicleType": "vehicle_type",
        "vehicleBrand": "vehicle_brand",
        "vehicleModel": "vehicle_model",
        "userSection": "user_section",
        "section": "user_section",
        "replacementDate": "replacement_date",
        "existingMake": "existing_make",
        "tireSize": "tire_size",
        "noOfTires": "no_of_tires",
        "numberOfTires": "no_of_tires",
        "tireCount": "no_of_tires",
        "noOfTubes": "no_of_tubes",
        "numberOfTubes": "no_of_tubes",
        "costCenter": "cost_center",
        "presentKm": "present_km",
        "previousKm": "previous_km",
        "wearIndicator": "wear_indicator",
        "wearPattern": "wear_pattern",
        "officerServiceNo": "officer_service_no",
        "email": "email",
        "comments": "comments",
    }

    @classmethod
    def field_names(cls):
        return [f.name for f in dataclasses.fields(cls)]

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "TireRequestDraft":
        """Build a draft from wire (camelCase) or model (snake_case) keys."""
        if not isinstance(data, Mapping):
            raise ValidationError("Request body must be a JSON object")
        names = set(cls.field_names())
        values = {}
        for key in data.keys():
            name = cls.WIRE_NAMES.get(key, key if key in names else None)
            if name is None or name in values:
                continue
            value = data.get(key)
            if value is not None and name not in TYPED_FIELDS:
                value = str(value)
            if isinstance(value, str):
                value = value.strip()
            values[name] = value
        return cls(**values)

    @classmethod
    def provided_fields(cls, data: Mapping[str, Any]) -> set:
        """Field names present in `data` under any accepted key."""
        names = set(cls.field_names())
        return {
            cls.WIRE_NAMES.get(key, key)
            for key in data.keys()
            if key in cls.WIRE_NAMES or key in names
        }

    @classmethod
    def from_instance(cls, instance) -> "TireRequestDraft":
        values = {name: getattr(instance, name, None) for name in cls.field_names()}
        if isinstance(values["replacement_date"], date):
            values["replacement_date"] = values["replacement_date"].strftime(DATE_FORMAT)
        return cls(**values)

    def merged(self, other: "TireRequestDraft", provided: Iterable[str]) -> "TireRequestDraft":
        """Return a copy with the `provided` fields taken from `other`."""
        return dataclasses.replace(
            self, **{name: getattr(other, name) for name in provided}
        )

    def to_model_fields(self) -> dict:
        """Typed values for persistence. Call only on a validated draft."""
        values = dataclasses.asdict(self)
        values["replacement_date"] = _parse_date(self.replacement_date)
        values["no_of_tires"] = _parse_int(self.no_of_tires)
        values["no_of_tubes"] = _parse_int(self.no_of_tubes)
        for name, value in values.items():
            if value is None and name not in TYPED_FIELDS:
                values[name] = ""
        return values

    def to_wire(self) -> dict:
        reverse = {}
        for wire, name in self.WIRE_NAMES.items():
            reverse.setdefault(name, wire)
        return {reverse[name]: getattr(self, name) for name in self.field_names()}


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_int(value) -> Optional[int]:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, int):
        return value
    return int(str(value).strip())


def _parse_date(value) -> Optional[date]:
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), DATE_FORMAT).date()


def cost_center_for(section: Optional[str]) -> str:
    return SECTION_COST_CENTERS.get((section or "").strip(), DEFAULT_COST_CENTER)


def service_number_for(section: Optional[str]) -> str:
    """Deterministic placeholder service number derived from the section."""
    checksum = zlib.crc32((section or "").strip().encode("utf-8"))
    return "SVC-%04d" % (checksum % 10000)


def email_for(service_no: str) -> str:
    return f"{service_no.lower()}@{EMAIL_DOMAIN}"


def auto_populate(draft: TireRequestDraft, profile: Optional[Mapping[str, str]] = None) -> TireRequestDraft:
    """
    Fill blank registered fields.

    The submitting user's profile wins over derived placeholders:
    section, service number and email are taken from it first.
    """
    updates = {}
    profile = profile or {}

    for name in ("user_section", "officer_service_no", "email"):
        if _is_blank(getattr(draft, name)) and not _is_blank(profile.get(name)):
            updates[name] = profile[name]

    draft = dataclasses.replace(draft, **updates)
    updates = {}

    if _is_blank(draft.cost_center):
        updates["cost_center"] = cost_center_for(draft.user_section)
    service_no = draft.officer_service_no
    if _is_blank(service_no):
        service_no = updates["officer_service_no"] = service_number_for(draft.user_section)
    if _is_blank(draft.email):
        updates["email"] = email_for(service_no)

    return dataclasses.replace(draft, **updates)


def _check_vehicle_no(draft, errors):
    if _is_blank(draft.vehicle_no):
        errors.append("Vehicle number is required")
    elif len(str(draft.vehicle_no)) > MAX_VEHICLE_NO_LENGTH:
        errors.append(
            f"Vehicle number cannot exceed {MAX_VEHICLE_NO_LENGTH} characters"
        )


def _check_user_section(draft, errors):
    if _is_blank(draft.user_section):
        errors.append("User section is required and cannot be empty")


def _check_replacement_date(draft, errors, today):
    if _is_blank(draft.replacement_date):
        errors.append("Replacement date is required")
        return
    try:
        requested = _parse_date(draft.replacement_date)
    except (TypeError, ValueError):
        errors.append("Invalid replacement date format. Please use YYYY-MM-DD format")
        return
    if requested > today:
        errors.append("Replacement date cannot be in the future")


def _check_quantity(value, errors, *, label, required, minimum, maximum):
    if _is_blank(value):
        if required:
            errors.append(f"Number of {label} is required")
        return
    try:
        quantity = _parse_int(value)
    except (TypeError, ValueError):
        errors.append(f"Number of {label} must be a valid number")
        return
    if quantity < minimum:
        if minimum == 0:
            errors.append(f"Number of {label} cannot be negative")
        else:
            errors.append(f"Number of {label} must be at least {minimum}")
    elif quantity > maximum:
        errors.append(f"Number of {label} cannot exceed {maximum}")


def _check_registered_fields(draft, errors):
    if _is_blank(draft.cost_center):
        errors.append(
            "Cost center should be automatically filled according to registered data"
        )
    if _is_blank(draft.officer_service_no):
        errors.append(
            "Officer service number should be automatically filled according to "
            "registered data"
        )
    if _is_blank(draft.email):
        errors.append(
            "Email should be automatically filled according to registered data"
        )
    elif not EMAIL_PATTERN.match(str(draft.email)):
        errors.append("Please provide a valid email address")


def _check_comments(draft, errors):
    if draft.comments and len(str(draft.comments)) > MAX_COMMENT_LENGTH:
        errors.append(f"Comments cannot exceed {MAX_COMMENT_LENGTH} characters")


def validate(draft: TireRequestDraft, today: Optional[date] = None) -> list:
    """Return every rule violation of `draft` (empty list when valid)."""
    today = today or timezone.localdate()
    errors = []
    _check_vehicle_no(draft, errors)
    _check_user_section(draft, errors)
    _check_replacement_date(draft, errors, today)
    _check_quantity(
        draft.no_of_tires,
        errors,
        label="tires",
        required=True,
        minimum=1,
        maximum=MAX_TIRE_QUANTITY,
    )
    _check_quantity(
        draft.no_of_tubes,
        errors,
        label="tubes",
        required=False,
        minimum=0,
        maximum=MAX_TUBE_QUANTITY,
    )
    _check_registered_fields(draft, errors)
    _check_comments(draft, errors)
    return errors


def format_file_size(size: int) -> str:
    if size >= 1024 * 1024:
        return "%.2f MB" % (size / (1024.0 * 1024.0))
    if size >= 1024:
        return "%.2f KB" % (size / 1024.0)
    return f"{size} bytes"


def validate_images(files) -> list:
    """
    Check uploaded image files: image/* content type, at most 5 MB each.
    Empty uploads are ignored. All violations are reported.
    """
    errors = []
    for upload in files or []:
        if upload is None or not upload.size:
            continue
        name = getattr(upload, "name", "") or ""
        if upload.size > MAX_IMAGE_SIZE:
            errors.append(
                "Image file size must be less than 5MB. Current file: "
                f"{name} ({format_file_size(upload.size)})"
            )
        content_type = getattr(upload, "content_type", None) or ""
        if not content_type.startswith("image/"):
            errors.append(f"Only image files are allowed. Invalid file: {name}")
    return errors
