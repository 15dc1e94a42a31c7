"""
Photo store normalization: consolidation order and idempotence, base64 image
detection, upload encoding, corrupted photo partitioning.
"""

from types import SimpleNamespace

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from apps.tire_requests.photos import (
    consolidate,
    encode_upload,
    encode_uploads,
    has_image_signature,
    is_valid_image,
    normalize_photos,
    partition_photos,
)
from apps.tire_requests.tests.helpers import (
    GIF_URL,
    JPEG_URL,
    PNG_BYTES,
    PNG_URL,
    TEXT_URL,
    WEBP_URL,
)


class ConsolidateTests(SimpleTestCase):
    def test_first_list_order_then_new_entries(self):
        self.assertEqual(
            consolidate(["a", "b"], ["b", "c", "a", "d"]), ["a", "b", "c", "d"]
        )

    def test_duplicates_within_a_list_are_dropped(self):
        self.assertEqual(consolidate(["a", "a"], None), ["a"])

    def test_none_and_empty(self):
        self.assertEqual(consolidate(None, None), [])
        self.assertEqual(consolidate([], ["x"]), ["x"])

    def test_idempotent(self):
        once = consolidate(["a", "b"], ["c", "a"])
        self.assertEqual(consolidate(once, []), once)
        self.assertEqual(consolidate(once, once), once)


class NormalizePhotosTests(SimpleTestCase):
    def test_both_fields_become_identical(self):
        record = SimpleNamespace(photo_urls=["a"], legacy_photo_urls=["b", "a"])
        self.assertTrue(normalize_photos(record))
        self.assertEqual(record.photo_urls, ["a", "b"])
        self.assertEqual(record.legacy_photo_urls, ["a", "b"])

    def test_already_normalized_reports_no_change(self):
        record = SimpleNamespace(photo_urls=["a", "b"], legacy_photo_urls=["a", "b"])
        self.assertFalse(normalize_photos(record))

    def test_missing_legacy_field_counts_as_change(self):
        record = SimpleNamespace(photo_urls=["a"], legacy_photo_urls=None)
        self.assertTrue(normalize_photos(record))
        self.assertEqual(record.legacy_photo_urls, ["a"])


class ImageDetectionTests(SimpleTestCase):
    def test_known_signatures(self):
        for url in (PNG_URL, JPEG_URL, GIF_URL, WEBP_URL):
            with self.subTest(url=url):
                self.assertTrue(is_valid_image(url))

    def test_padding_is_optional(self):
        self.assertTrue(is_valid_image(PNG_URL.rstrip("=")))
        self.assertTrue(is_valid_image(JPEG_URL.rstrip("=")))

    def test_rejects_non_images(self):
        cases = [
            None,
            "",
            42,
            "https://example.com/tire.png",
            "data:text/plain;base64,iVBORw0KGgoAAAANSUhEUg==",
            "data:image/png;base64,",
            "data:image/png;base64,not base64!!",
            TEXT_URL,
            # RIFF container that is not WebP
            "data:image/webp;base64,UklGRiQAAABXQVZFZm10IA==",
        ]
        for url in cases:
            with self.subTest(url=url):
                self.assertFalse(is_valid_image(url))

    def test_short_data_is_not_an_image(self):
        self.assertFalse(has_image_signature(b"\xff\xd8"))
        self.assertFalse(has_image_signature(None))


class UploadEncodingTests(SimpleTestCase):
    def test_png_upload_becomes_data_url(self):
        upload = SimpleUploadedFile("t.png", PNG_BYTES, content_type="image/png")
        self.assertEqual(encode_upload(upload), PNG_URL)

    def test_non_image_uploads_are_skipped(self):
        uploads = [
            SimpleUploadedFile("a.txt", b"hello world", content_type="text/plain"),
            SimpleUploadedFile("b.png", b"hello world", content_type="image/png"),
            SimpleUploadedFile("c.png", PNG_BYTES, content_type="image/png"),
        ]
        self.assertEqual(encode_uploads(uploads), [PNG_URL])


class PartitionTests(SimpleTestCase):
    def test_corrupted_reported_by_preview(self):
        corrupted = "data:image/png;base64," + "A" * 100
        valid, previews = partition_photos([PNG_URL, corrupted, JPEG_URL])
        self.assertEqual(valid, [PNG_URL, JPEG_URL])
        self.assertEqual(previews, [corrupted[:50]])
