"""
Tire request API: submission (multipart and JSON), dry-run validation,
dashboards, role checks, photo endpoints, PDF export, delete.
"""

from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.audit.models import AuditLog
from apps.tire_requests.models import TireRequest
from apps.tire_requests.tests.helpers import (
    JPEG_URL,
    PNG_URL,
    TEXT_URL,
    make_request,
    make_user,
    png_upload,
    valid_payload,
)


class SubmitRequestTests(APITestCase):
    def setUp(self):
        self.employee = make_user(
            "tr_employee",
            email="driver@company.com",
            section="IT",
            service_number="SVC-0042",
        )
        self.client.force_authenticate(self.employee)

    def test_multipart_submission_with_photos(self):
        payload = valid_payload()
        payload["tirePhotos"] = [png_upload("a.png")]

        response = self.client.post(
            reverse("tire_requests:collection"), payload, format="multipart"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        data = response.json()["data"]
        self.assertEqual(data["status"], "SUBMITTED")
        self.assertEqual(data["vehicleNo"], "WP-1234")
        self.assertEqual(data["noOfTires"], 4)
        self.assertEqual(data["photoUrls"], [PNG_URL])
        self.assertEqual(data["tirePhotoUrls"], [PNG_URL])
        self.assertEqual(data["costCenter"], "IT-001")
        self.assertEqual(data["officerServiceNo"], "SVC-0042")
        self.assertEqual(data["email"], "driver@company.com")
        self.assertEqual(data["submittedBy"], str(self.employee.id))

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["manager@company.com"])
        self.assertEqual(
            mail.outbox[0].subject, "New Tire Request Awaiting Approval - WP-1234"
        )
        self.assertTrue(
            AuditLog.objects.filter(
                event_type="TIRE_REQUEST_CREATED", entity_id=data["id"]
            ).exists()
        )

    def test_json_submission_consolidates_photo_lists(self):
        payload = valid_payload(
            photoUrls=[PNG_URL], tirePhotoUrls=[JPEG_URL, PNG_URL]
        )
        response = self.client.post(
            reverse("tire_requests:collection"), payload, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        obj = TireRequest.objects.get(id=response.json()["data"]["id"])
        self.assertEqual(obj.photo_urls, [PNG_URL, JPEG_URL])
        self.assertEqual(obj.legacy_photo_urls, obj.photo_urls)

    def test_invalid_submission_reports_all_errors(self):
        payload = valid_payload(vehicleNo="", noOfTires="0", replacementDate="2999-01-01")
        response = self.client.post(
            reverse("tire_requests:collection"), payload, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        error = response.json()["error"]
        self.assertEqual(error["code"], "VALIDATION_ERROR")
        self.assertEqual(
            error["details"]["errors"],
            [
                "Vehicle number is required",
                "Replacement date cannot be in the future",
                "Number of tires must be at least 1",
            ],
        )
        self.assertEqual(TireRequest.objects.count(), 0)
        self.assertEqual(len(mail.outbox), 0)

    def test_numeric_registered_fields_are_taken_as_text(self):
        self.client.force_authenticate(make_user("tr_no_profile"))
        payload = valid_payload(officerServiceNo=12345, userSection=7, noOfTires=4)
        response = self.client.post(
            reverse("tire_requests:collection"), payload, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        data = response.json()["data"]
        self.assertEqual(data["officerServiceNo"], "12345")
        self.assertEqual(data["userSection"], "7")
        self.assertEqual(data["costCenter"], "GEN-001")
        self.assertEqual(data["email"], "12345@company.com")
        self.assertEqual(data["noOfTires"], 4)

    def test_body_must_be_an_object(self):
        for name in ("tire_requests:collection", "tire_requests:validate"):
            with self.subTest(url=name):
                response = self.client.post(reverse(name), [1, 2], format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                error = response.json()["error"]
                self.assertEqual(error["code"], "VALIDATION_ERROR")
                self.assertEqual(error["message"], "Request body must be a JSON object")
        self.assertEqual(TireRequest.objects.count(), 0)

    def test_non_image_upload_rejected(self):
        from django.core.files.uploadedfile import SimpleUploadedFile

        payload = valid_payload()
        payload["tirePhotos"] = [
            SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        ]
        response = self.client.post(
            reverse("tire_requests:collection"), payload, format="multipart"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.json()["error"]["details"]["errors"],
            ["Only image files are allowed. Invalid file: notes.txt"],
        )

    def test_validate_endpoint_does_not_persist(self):
        response = self.client.post(
            reverse("tire_requests:validate"), valid_payload(), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertTrue(data["valid"])
        self.assertEqual(data["data"]["costCenter"], "IT-001")
        self.assertEqual(TireRequest.objects.count(), 0)

        response = self.client.post(
            reverse("tire_requests:validate"),
            valid_payload(comments="x" * 501),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.json()["error"]["details"]["errors"],
            ["Comments cannot exceed 500 characters"],
        )

    def test_validate_images_endpoint(self):
        response = self.client.post(
            reverse("tire_requests:validate-images"),
            {"tirePhotos": [png_upload()]},
            format="multipart",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["fileCount"], 1)

    def test_unauthenticated_is_rejected(self):
        response = APIClient().get(reverse("tire_requests:collection"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["error"]["code"], "UNAUTHORIZED")


class UpdateRequestTests(APITestCase):
    def setUp(self):
        self.employee = make_user("tr_updater")
        self.client.force_authenticate(self.employee)
        self.req = make_request(photo_urls=[PNG_URL], legacy_photo_urls=[PNG_URL])

    def test_partial_update_keeps_other_fields(self):
        response = self.client.put(
            reverse("tire_requests:detail", args=[self.req.id]),
            {"comments": "Rear tires too", "noOfTires": "2"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        data = response.json()["data"]
        self.assertEqual(data["comments"], "Rear tires too")
        self.assertEqual(data["noOfTires"], 2)
        self.assertEqual(data["vehicleNo"], "WP-1234")
        self.assertEqual(data["photoUrls"], [PNG_URL])
        self.assertEqual(data["version"], 2)

    def test_update_replaces_photo_list(self):
        response = self.client.put(
            reverse("tire_requests:detail", args=[self.req.id]),
            {"tirePhotoUrls": [JPEG_URL]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.req.refresh_from_db()
        self.assertEqual(self.req.photo_urls, [JPEG_URL])
        self.assertEqual(self.req.legacy_photo_urls, [JPEG_URL])

    def test_invalid_update_is_rejected(self):
        response = self.client.put(
            reverse("tire_requests:detail", args=[self.req.id]),
            {"vehicleNo": "TOO-LONG-NUMBER"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.req.refresh_from_db()
        self.assertEqual(self.req.vehicle_no, "WP-1234")

    def test_stale_version_conflict(self):
        response = self.client.put(
            reverse("tire_requests:detail", args=[self.req.id]),
            {"comments": "x", "version": 5},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"]["code"], "CONFLICT")


class DecisionEndpointTests(APITestCase):
    def setUp(self):
        self.employee = make_user("dec_employee")
        self.manager = make_user("dec_manager", role="MANAGER")
        self.tto = make_user("dec_tto", role="TTO")
        self.admin = make_user("dec_admin", role="ADMIN")
        self.req = make_request()

    def test_employee_cannot_approve(self):
        self.client.force_authenticate(self.employee)
        response = self.client.post(
            reverse("tire_requests:manager-approve", args=[self.req.id])
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.req.refresh_from_db()
        self.assertEqual(self.req.status, "SUBMITTED")

    def test_tto_cannot_use_manager_endpoint(self):
        self.client.force_authenticate(self.tto)
        response = self.client.post(
            reverse("tire_requests:manager-approve", args=[self.req.id])
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_approves(self):
        self.client.force_authenticate(self.manager)
        response = self.client.post(
            reverse("tire_requests:manager-approve", args=[self.req.id])
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["status"], "MANAGER_APPROVED")

    def test_admin_passes_role_checks(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            reverse("tire_requests:manager-reject", args=[self.req.id]),
            {"reason": "Duplicate"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["rejectionReason"], "Duplicate")

    def test_reject_without_reason(self):
        self.client.force_authenticate(self.manager)
        response = self.client.post(
            reverse("tire_requests:manager-reject", args=[self.req.id]),
            {},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_ERROR")

    def test_tto_reject_before_manager_approval(self):
        self.client.force_authenticate(self.tto)
        response = self.client.post(
            reverse("tire_requests:tto-reject", args=[self.req.id]),
            {"rejectionReason": "Too early"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        error = response.json()["error"]
        self.assertEqual(error["code"], "INVALID_STATE")
        self.assertEqual(error["message"], "Request must be approved by manager first")

    def test_approve_emits_structured_log_with_request_id(self):
        request_id = "tire-correlation-id-1"
        self.client.force_authenticate(self.manager)
        with self.assertLogs("apps.tire_requests.services", level="INFO") as cm:
            response = self.client.post(
                reverse("tire_requests:manager-approve", args=[self.req.id]),
                HTTP_X_REQUEST_ID=request_id,
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.get("X-Request-ID"), request_id)
        records = [r for r in cm.records if getattr(r, "operation", None) == "MANAGER_APPROVE"]
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].getMessage(), "tire_request_manager_approved")
        self.assertEqual(records[0].entity_id, str(self.req.id))
        self.assertEqual(records[0].request_id, request_id)
        entry = AuditLog.objects.get(event_type="TIRE_REQUEST_MANAGER_APPROVED")
        self.assertEqual(entry.request_id, request_id)


class DashboardTests(APITestCase):
    def setUp(self):
        self.manager = make_user("dash_manager", role="MANAGER")
        self.engineer = make_user("dash_engineer", role="ENGINEER")
        self.submitted = make_request(vehicle_no="A-1", photo_urls=[PNG_URL])
        self.legacy = make_request(vehicle_no="A-2", status="PENDING")
        self.tto_approved = make_request(vehicle_no="A-3", status="TTO_APPROVED")

    def test_manager_dashboard(self):
        self.client.force_authenticate(self.manager)
        response = self.client.get(reverse("tire_requests:manager-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        vehicles = sorted(r["vehicleNo"] for r in response.json()["results"])
        self.assertEqual(vehicles, ["A-1", "A-2"])

    def test_dashboard_without_photos(self):
        self.client.force_authenticate(self.manager)
        response = self.client.get(
            reverse("tire_requests:manager-dashboard"), {"includePhotos": "false"}
        )
        rows = {r["vehicleNo"]: r for r in response.json()["results"]}
        self.assertNotIn("photoUrls", rows["A-1"])
        self.assertEqual(rows["A-1"]["photoCount"], 1)

    def test_dashboard_requires_stage_role(self):
        self.client.force_authenticate(self.engineer)
        response = self.client.get(reverse("tire_requests:manager-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.get(reverse("tire_requests:engineer-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([r["vehicleNo"] for r in response.json()["results"]], ["A-3"])

    def test_list_filtered_by_status(self):
        self.client.force_authenticate(self.engineer)
        response = self.client.get(
            reverse("tire_requests:collection"), {"status": ["PENDING", "TTO_APPROVED"]}
        )
        vehicles = sorted(r["vehicleNo"] for r in response.json()["results"])
        self.assertEqual(vehicles, ["A-2", "A-3"])

    def test_counts(self):
        self.client.force_authenticate(self.engineer)
        response = self.client.get(reverse("tire_requests:counts"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["managerRequests"], 2)
        self.assertEqual(data["ttoRequests"], 1)
        self.assertEqual(data["engineerRequests"], 1)
        self.assertEqual(data["totalRequests"], 3)
        self.assertEqual(data["byStatus"]["PENDING"], 1)


class PhotoAndExportTests(APITestCase):
    def setUp(self):
        self.employee = make_user("photo_employee")
        self.admin = make_user("photo_admin", role="ADMIN")
        self.client.force_authenticate(self.employee)

    def test_get_normalizes_divergent_photo_fields(self):
        req = make_request(photo_urls=[PNG_URL], legacy_photo_urls=[JPEG_URL, PNG_URL])
        response = self.client.get(reverse("tire_requests:detail", args=[req.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["photoUrls"], [PNG_URL, JPEG_URL])
        self.assertEqual(data["tirePhotoUrls"], [PNG_URL, JPEG_URL])
        req.refresh_from_db()
        self.assertEqual(req.photo_urls, [PNG_URL, JPEG_URL])
        self.assertEqual(req.legacy_photo_urls, [PNG_URL, JPEG_URL])
        self.assertEqual(req.version, 1)

    def test_photos_endpoint(self):
        req = make_request(legacy_photo_urls=[JPEG_URL])
        response = self.client.get(reverse("tire_requests:photos", args=[req.id]))
        data = response.json()["data"]
        self.assertEqual(data["photoUrls"], [JPEG_URL])
        self.assertEqual(data["count"], 1)

    def test_validate_photos_removes_corrupted(self):
        req = make_request(photo_urls=[PNG_URL, TEXT_URL], legacy_photo_urls=[TEXT_URL])
        response = self.client.post(reverse("tire_requests:validate-photos", args=[req.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["totalPhotos"], 2)
        self.assertEqual(data["validPhotos"], 1)
        self.assertEqual(data["corruptedPhotosRemoved"], 1)
        self.assertEqual(data["corruptedPreviews"], [TEXT_URL[:50]])
        req.refresh_from_db()
        self.assertEqual(req.photo_urls, [PNG_URL])
        self.assertEqual(req.legacy_photo_urls, [PNG_URL])

    def test_pdf_export(self):
        req = make_request(rejection_reason="Needs <b>review</b> & check")
        response = self.client.get(reverse("tire_requests:pdf", args=[req.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn(f"tire_request_{req.id}.pdf", response["Content-Disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_missing_request_is_404(self):
        response = self.client.get(
            reverse(
                "tire_requests:detail", args=["00000000-0000-0000-0000-000000000000"]
            )
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")

    def test_delete_requires_admin(self):
        req = make_request()
        response = self.client.delete(reverse("tire_requests:detail", args=[req.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(TireRequest.objects.filter(id=req.id).exists())

        self.client.force_authenticate(self.admin)
        response = self.client.delete(reverse("tire_requests:detail", args=[req.id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(TireRequest.objects.filter(id=req.id).exists())
        self.assertTrue(
            AuditLog.objects.filter(event_type="TIRE_REQUEST_DELETED", entity_id=req.id).exists()
        )
