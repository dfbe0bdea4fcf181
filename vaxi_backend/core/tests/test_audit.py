"""Tests for core audit logging and the health endpoint.

Tests cover:
- log_patient_action writes AuditLog rows with the caller's role
- Anonymous callers are logged without a user
- License numbers of vaccinating staff are copied into the entry
- Actions outside the vocabulary are stored but warned about
- Audit failures never propagate
- Health (GET /api/health/)

Uses only the default/system test DB.
"""

from __future__ import annotations

from unittest.mock import patch

from django.contrib.auth.models import AnonymousUser
from django.db import DatabaseError
from django.test import TestCase

from rest_framework import status
from rest_framework.test import APIClient

from vaxi_backend.core.models import AuditLog, Role, User
from vaxi_backend.core.utils import log_patient_action


class AuditLogTest(TestCase):
    """Tests for core.utils.log_patient_action."""

    databases = {"default"}

    def setUp(self):
        self.role_nurse, _ = Role.objects.using("default").get_or_create(
            name="nurse",
            defaults={"label": "Impfpersonal"},
        )
        self.nurse = User.objects.db_manager("default").create_user(
            username="nurse_audit_test",
            email="nurse_audit@example.com",
            password="DummyPass123!",
            role=self.role_nurse,
        )

    def test_writes_entry_with_role(self):
        log_patient_action(self.nurse, "appointment_book", 42, meta={"dose": 1})

        entry = AuditLog.objects.using("default").get()
        self.assertEqual(entry.user, self.nurse)
        self.assertEqual(entry.role_name, "nurse")
        self.assertEqual(entry.action, "appointment_book")
        self.assertEqual(entry.patient_id, 42)
        self.assertEqual(entry.meta, {"dose": 1})

    def test_anonymous_user_is_not_linked(self):
        log_patient_action(AnonymousUser(), "appointment_list")

        entry = AuditLog.objects.using("default").get()
        self.assertIsNone(entry.user)
        self.assertEqual(entry.role_name, "")
        self.assertIsNone(entry.patient_id)

    def test_license_number_copied_into_meta(self):
        self.nurse.license_number = "MP-54321"
        self.nurse.save(using="default")

        log_patient_action(self.nurse, AuditLog.ACTION_APPOINTMENT_BOOK, 42, meta={"dose": 2})

        entry = AuditLog.objects.using("default").get()
        self.assertEqual(entry.meta, {"dose": 2, "license_number": "MP-54321"})

    def test_unknown_action_is_stored_with_warning(self):
        with self.assertLogs("vaxi_backend.core.utils", level="WARNING") as logs:
            log_patient_action(self.nurse, "lot_recount", 7)

        self.assertIn("lot_recount", logs.output[0])
        self.assertTrue(AuditLog.objects.using("default").filter(action="lot_recount").exists())

    def test_entry_str_uses_action_label(self):
        log_patient_action(self.nurse, AuditLog.ACTION_APPOINTMENT_RESCHEDULE, 42)

        entry = AuditLog.objects.using("default").get()
        self.assertEqual(str(entry), "Vaccination rescheduled (patient_id=42, role=nurse)")

    def test_write_failure_is_logged_not_raised(self):
        with patch.object(AuditLog.objects, "using", side_effect=DatabaseError("down")):
            with self.assertLogs("vaxi_backend.core.utils", level="ERROR"):
                log_patient_action(self.nurse, "appointment_book", 1)


class HealthTest(TestCase):
    """Tests for /api/health/."""

    databases = {"default"}

    def test_health_without_auth(self):
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        response = client.get("/api/health/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"status": "ok"})
