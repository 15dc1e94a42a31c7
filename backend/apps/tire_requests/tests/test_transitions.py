"""
Approval workflow transitions: guards, notifications, audit entries and
version locking.
"""

from smtplib import SMTPException
from unittest.mock import patch

from django.core import mail
from django.test import TestCase

from core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from apps.audit.models import AuditLog
from apps.tire_requests import services
from apps.tire_requests.models import TireRequest
from apps.tire_requests.state_machine import check_transition
from apps.tire_requests.tests.helpers import make_request, make_user
from apps.tire_requests.versioning import version_locked_update


class ManagerDecisionTests(TestCase):
    def setUp(self):
        self.manager = make_user("tr_manager", role="MANAGER")
        self.req = make_request()

    def test_approve_sets_status_and_notifies_tto_once(self):
        result = services.manager_approve(self.req.id, self.manager.id)

        self.assertEqual(result.status, "MANAGER_APPROVED")
        self.assertIsNotNone(result.manager_approved_at)
        self.assertEqual(result.version, 2)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["tto@company.com"])
        self.assertEqual(
            mail.outbox[0].subject,
            "Tire Request Approved by Manager - Awaiting TTO Review - WP-1234",
        )

    def test_approve_accepts_legacy_pending_status(self):
        legacy = make_request(vehicle_no="WP-9", status="PENDING")
        result = services.manager_approve(legacy.id, self.manager.id)
        self.assertEqual(result.status, "MANAGER_APPROVED")

    def test_reject_requires_reason(self):
        with self.assertRaises(ValidationError):
            services.manager_reject(self.req.id, "   ", self.manager.id)
        self.req.refresh_from_db()
        self.assertEqual(self.req.status, "SUBMITTED")

    def test_reject_stores_reason_without_notification(self):
        result = services.manager_reject(self.req.id, "Tires still fine", self.manager.id)
        self.assertEqual(result.status, "MANAGER_REJECTED")
        self.assertEqual(result.rejection_reason, "Tires still fine")
        self.assertIsNotNone(result.manager_rejected_at)
        self.assertEqual(len(mail.outbox), 0)

    def test_transition_writes_audit_entry(self):
        services.manager_approve(self.req.id, self.manager.id)
        entry = AuditLog.objects.get(event_type="TIRE_REQUEST_MANAGER_APPROVED")
        self.assertEqual(entry.entity_type, "TireRequest")
        self.assertEqual(entry.entity_id, self.req.id)
        self.assertEqual(entry.actor, self.manager)
        self.assertEqual(entry.previous_state["status"], "SUBMITTED")
        self.assertEqual(entry.new_state["status"], "MANAGER_APPROVED")

    def test_unknown_request(self):
        with self.assertRaises(NotFoundError):
            services.manager_approve("00000000-0000-0000-0000-000000000000")

    def test_notification_failure_keeps_transition(self):
        with patch(
            "apps.notifications.transports.DjangoMailSender.send",
            side_effect=SMTPException("connection refused"),
        ):
            with self.assertLogs("apps.notifications.dispatcher", level="ERROR") as cm:
                result = services.manager_approve(self.req.id, self.manager.id)

        self.assertEqual(result.status, "MANAGER_APPROVED")
        self.req.refresh_from_db()
        self.assertEqual(self.req.status, "MANAGER_APPROVED")
        self.assertTrue(any(r.getMessage() == "notification_failed" for r in cm.records))


class TTODecisionTests(TestCase):
    def setUp(self):
        self.tto = make_user("tr_tto", role="TTO")

    def test_reject_requires_manager_approval(self):
        req = make_request()
        with self.assertRaises(InvalidStateError) as ctx:
            services.tto_reject(req.id, "Not needed", self.tto.id)

        self.assertEqual(ctx.exception.message, "Request must be approved by manager first")
        req.refresh_from_db()
        self.assertEqual(req.status, "SUBMITTED")
        self.assertIsNone(req.rejection_reason)

    def test_reject_accepts_historic_approved_status(self):
        req = make_request(status="APPROVED")
        result = services.tto_reject(req.id, "Budget", self.tto.id)
        self.assertEqual(result.status, "TTO_REJECTED")
        self.assertIsNotNone(result.tto_rejected_at)

    def test_approve_notifies_engineer(self):
        req = make_request(status="MANAGER_APPROVED")
        result = services.tto_approve(req.id, self.tto.id)
        self.assertEqual(result.status, "TTO_APPROVED")
        self.assertEqual([m.to for m in mail.outbox], [["engineer@company.com"]])

    def test_approve_from_unexpected_state_is_permitted_with_warning(self):
        req = make_request(status="MANAGER_REJECTED")
        with self.assertLogs("apps.tire_requests.state_machine", level="WARNING"):
            result = services.tto_approve(req.id, self.tto.id)
        self.assertEqual(result.status, "TTO_APPROVED")


class EngineerDecisionTests(TestCase):
    def setUp(self):
        self.engineer = make_user("tr_engineer", role="ENGINEER")

    def test_approve_notifies_requester(self):
        req = make_request(status="TTO_APPROVED")
        result = services.engineer_approve(req.id, self.engineer.id)
        self.assertEqual(result.status, "ENGINEER_APPROVED")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["driver@company.com"])
        self.assertIn(f"/order-tires/{req.id}", mail.outbox[0].body)

    def test_reject_reason_is_optional(self):
        req = make_request(status="TTO_APPROVED")
        result = services.engineer_reject(req.id, None, self.engineer.id)
        self.assertEqual(result.status, "ENGINEER_REJECTED")
        self.assertIsNone(result.rejection_reason)

    def test_reject_then_approve_is_permitted(self):
        # Engineer decisions are not guarded; a rejection can be revisited.
        req = make_request(status="TTO_APPROVED")
        services.engineer_reject(req.id, "Wrong size", self.engineer.id)
        result = services.engineer_approve(req.id, self.engineer.id)
        self.assertEqual(result.status, "ENGINEER_APPROVED")
        self.assertIsNone(result.rejection_reason)
        self.assertEqual(result.version, 3)


class FullWorkflowTests(TestCase):
    def test_submitted_to_engineer_approved(self):
        manager = make_user("wf_manager", role="MANAGER")
        tto = make_user("wf_tto", role="TTO")
        engineer = make_user("wf_engineer", role="ENGINEER")
        req = make_request()

        services.manager_approve(req.id, manager.id)
        services.tto_approve(req.id, tto.id)
        result = services.engineer_approve(req.id, engineer.id)

        self.assertEqual(result.status, "ENGINEER_APPROVED")
        self.assertEqual(
            [m.to[0] for m in mail.outbox],
            ["tto@company.com", "engineer@company.com", "driver@company.com"],
        )
        self.assertEqual(
            AuditLog.objects.filter(entity_id=req.id).count(), 3
        )


class VersionLockTests(TestCase):
    def test_stale_version_raises_conflict(self):
        req = make_request()
        stale_version = req.version
        services.manager_approve(req.id)

        with self.assertRaises(ConflictError):
            version_locked_update(
                TireRequest.objects.filter(id=req.id),
                stale_version,
                status="MANAGER_REJECTED",
            )
        req.refresh_from_db()
        self.assertEqual(req.status, "MANAGER_APPROVED")

    def test_update_with_stale_client_version_conflicts(self):
        req = make_request()
        with self.assertRaises(ConflictError):
            services.update_request(req.id, {"comments": "x", "version": 7})


class CheckTransitionTests(TestCase):
    def test_unknown_action(self):
        with self.assertRaises(KeyError):
            check_transition("seller_approve", "id", "SUBMITTED")
