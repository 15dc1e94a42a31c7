"""
Photo store normalization for tire requests.

Photos are stored inline as base64 data URLs. Historic records carry two
photo lists (`photo_urls` and `legacy_photo_urls`); they are merged into one
deduplicated list and written back to both fields.

Nothing here touches request status or sends notifications.
"""

import base64
import binascii
import logging

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/"

# (offset, magic bytes) pairs; every pair must match.
IMAGE_SIGNATURES = {
    "jpeg": ((0, b"\xff\xd8\xff"),),
    "png": ((0, b"\x89PNG"),),
    "gif": ((0, b"GIF8"),),
    "webp": ((0, b"RIFF"), (8, b"WEBP")),
}

PREVIEW_LENGTH = 50


def consolidate(first, second):
    """
    Merge two photo lists into one, preserving first-seen order.

    Entries of `first` come first, followed by entries of `second` not
    already present. Duplicates inside either list are dropped. None is
    treated as an empty list.
    """
    merged = []
    seen = set()
    for photo in list(first or []) + list(second or []):
        if photo in seen:
            continue
        seen.add(photo)
        merged.append(photo)
    return merged


def normalize_photos(tire_request):
    """
    Consolidate both stored photo fields of `tire_request` in place.

    Returns True when either field changed (the caller decides whether to
    persist).
    """
    merged = consolidate(tire_request.photo_urls, tire_request.legacy_photo_urls)
    changed = merged != (tire_request.photo_urls or []) or merged != (
        tire_request.legacy_photo_urls or []
    )
    tire_request.photo_urls = merged
    tire_request.legacy_photo_urls = list(merged)
    return changed


def has_image_signature(data):
    """True when `data` starts with a JPEG, PNG, GIF or WebP signature."""
    if data is None or len(data) < 4:
        return False
    for checks in IMAGE_SIGNATURES.values():
        if all(data[offset:offset + len(magic)] == magic for offset, magic in checks):
            return True
    return False


def _decode_payload(data_url):
    header, sep, payload = data_url.partition(",")
    if not sep or not payload:
        return None
    # Padding is optional.
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def is_valid_image(data_url):
    """
    True iff `data_url` is a `data:image/...` URL whose base64 payload
    decodes to bytes with a recognised image signature. Never raises.
    """
    if not isinstance(data_url, str) or not data_url.startswith(DATA_URL_PREFIX):
        return False
    return has_image_signature(_decode_payload(data_url))


def encode_upload(upload):
    """
    Convert an uploaded image file into a data URL.

    Returns None for non-image content types, empty files and bytes without
    a known image signature.
    """
    content_type = getattr(upload, "content_type", None) or "image/jpeg"
    if not content_type.startswith("image/"):
        logger.warning(
            "photo_upload_skipped",
            extra={"reason": "content_type", "content_type": content_type},
        )
        return None

    upload.seek(0)
    data = upload.read()
    if not data or not has_image_signature(data):
        logger.warning(
            "photo_upload_skipped",
            extra={"reason": "signature", "upload_name": getattr(upload, "name", "")},
        )
        return None

    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def encode_uploads(uploads):
    return [url for url in (encode_upload(u) for u in uploads or []) if url]


def partition_photos(photos):
    """
    Split `photos` into (valid, corrupted_previews).

    Corrupted entries are reported by their first 50 characters only.
    """
    valid, corrupted = [], []
    for photo in photos or []:
        if is_valid_image(photo):
            valid.append(photo)
        else:
            corrupted.append(str(photo)[:PREVIEW_LENGTH])
    return valid, corrupted
