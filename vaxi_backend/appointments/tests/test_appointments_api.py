"""Tests for the vaccination appointment endpoints.

Tests cover:
- List appointments (GET /api/appointments/)
- Book appointments (POST /api/appointments/)
- Retrieve appointment (GET /api/appointments/<pk>/)
- Reschedule appointment (PUT/PATCH /api/appointments/<pk>/)
- Application history (GET /api/appointments/<pk>/applications/)
- RBAC (read/write roles) and error translation (400/404/409/500)

Uses only the default/system test DB.
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from rest_framework import status
from rest_framework.test import APIClient

from vaxi_backend.appointments.models import Appointment, VaccineApplication
from vaxi_backend.appointments.services.scheduling import book_appointment
from vaxi_backend.appointments.tests.helpers import VaccinationFixturesMixin
from vaxi_backend.core.models import User
from vaxi_backend.inventory.models import InventoryLot


class AppointmentAPITest(VaccinationFixturesMixin, TestCase):
    """Tests for /api/appointments/ endpoints."""

    databases = {"default"}

    def setUp(self):
        super().setUp()
        self.appointment = book_appointment(data=self.booking_data(), user=self.nurse)

    def _client_for(self, user: User | None) -> APIClient:
        client = APIClient()
        client.defaults["HTTP_HOST"] = "localhost"
        if user is not None:
            client.force_authenticate(user=user)
        return client

    def _payload(self, **overrides):
        data = self.booking_data(**overrides)
        data["scheduled_at"] = data["scheduled_at"].isoformat()
        return data

    # ========== LIST / RETRIEVE ==========

    @patch("vaxi_backend.appointments.views.log_patient_action")
    def test_list_as_auditor(self, mock_log):
        client = self._client_for(self.auditor)
        response = client.get("/api/appointments/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["id"], self.appointment.id)
        self.assertEqual(response.data[0]["application"]["dose"], 1)
        mock_log.assert_called_once()

    @patch("vaxi_backend.appointments.views.log_patient_action")
    def test_list_filtered_by_patient(self, mock_log):
        client = self._client_for(self.admin)

        response = client.get("/api/appointments/", {"patient_id": self.patient2.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 0)

        response = client.get("/api/appointments/", {"patient_id": "abc"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch("vaxi_backend.appointments.views.log_patient_action")
    def test_retrieve(self, mock_log):
        client = self._client_for(self.reception)
        response = client.get(f"/api/appointments/{self.appointment.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["patient"]["id"], self.patient.id)
        self.assertEqual(response.data["application"]["lot"]["id"], self.lot_mmr.id)
        self.assertEqual(response.data["application"]["status"], VaccineApplication.STATUS_PENDING)
        self.assertEqual(response.data["agent"]["license_number"], "MP-12345")
        mock_log.assert_called_once_with(self.reception, "appointment_view", self.patient.id)

    @patch("vaxi_backend.appointments.views.log_patient_action")
    def test_retrieve_missing(self, mock_log):
        client = self._client_for(self.admin)
        response = client.get("/api/appointments/999999/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unauthenticated(self):
        client = self._client_for(None)

        self.assertEqual(client.get("/api/appointments/").status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(
            client.post("/api/appointments/", self._payload(), format="json").status_code,
            status.HTTP_401_UNAUTHORIZED,
        )

    # ========== BOOK ==========

    def test_book_as_nurse(self):
        client = self._client_for(self.nurse2)
        response = client.post("/api/appointments/", self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["application"]["dose"], 2)
        self.assertEqual(response.data["agent"]["id"], self.nurse2.id)
        self.assertEqual(response.data["application"]["agent"]["id"], self.nurse2.id)
        self.assertEqual(self.remaining(self.lot_mmr), 3)

    def test_book_as_auditor_forbidden(self):
        client = self._client_for(self.auditor)
        response = client.post("/api/appointments/", self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.remaining(self.lot_mmr), 4)

    def test_book_without_stock(self):
        client = self._client_for(self.reception)
        self.lot_flu.delete()

        response = client.post(
            "/api/appointments/",
            self._payload(vaccine_type_id=self.flu.id),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "no_stock_available")
        self.assertEqual(Appointment.objects.using("default").count(), 1)

    def test_book_missing_field(self):
        client = self._client_for(self.nurse)
        payload = self._payload()
        del payload["guardian_id"]

        response = client.post("/api/appointments/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("guardian_id", response.data)

    def test_book_unknown_patient(self):
        client = self._client_for(self.nurse)
        response = client.post("/api/appointments/", self._payload(patient_id=999999), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "validation_failed")
        self.assertEqual(response.data["field"], "patient_id")

    def test_book_store_failure(self):
        client = self._client_for(self.nurse)
        with patch(
            "vaxi_backend.appointments.services.scheduling._persist_appointment",
            side_effect=DatabaseError("connection lost"),
        ):
            response = client.post("/api/appointments/", self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["code"], "persistence_error")
        self.assertNotIn("connection lost", response.data["detail"])
        self.assertEqual(self.remaining(self.lot_mmr), 4)

    # ========== RESCHEDULE ==========

    def test_reschedule_put(self):
        client = self._client_for(self.nurse2)
        new_time = (self.scheduled_at + timedelta(days=3)).isoformat()

        response = client.put(
            f"/api/appointments/{self.appointment.id}/",
            {"scheduled_at": new_time, "notes": "second arm"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotEqual(response.data["application"]["id"], self.appointment.application_id)
        self.assertEqual(response.data["application"]["dose"], 1)
        self.assertEqual(response.data["agent"]["id"], self.nurse2.id)
        self.assertEqual(response.data["notes"], "second arm")
        self.assertEqual(self.remaining(self.lot_mmr), 3)

    def test_reschedule_patch_changes_vaccine_type(self):
        client = self._client_for(self.admin)
        response = client.patch(
            f"/api/appointments/{self.appointment.id}/",
            {"vaccine_type_id": self.flu.id},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["vaccine_type"]["id"], self.flu.id)
        self.assertEqual(response.data["application"]["lot"]["id"], self.lot_flu.id)

    def test_reschedule_missing(self):
        client = self._client_for(self.nurse)
        response = client.put("/api/appointments/999999/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "appointment_not_found")

    def test_reschedule_as_auditor_forbidden(self):
        client = self._client_for(self.auditor)
        response = client.put(f"/api/appointments/{self.appointment.id}/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reschedule_without_stock(self):
        client = self._client_for(self.nurse)
        InventoryLot.objects.using("default").filter(id=self.lot_mmr.id).update(remaining_quantity=0)

        response = client.put(f"/api/appointments/{self.appointment.id}/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        stored = Appointment.objects.using("default").get(id=self.appointment.id)
        self.assertEqual(stored.application_id, self.appointment.application_id)

    # ========== HISTORY ==========

    def test_application_history(self):
        client = self._client_for(self.nurse)
        client.put(f"/api/appointments/{self.appointment.id}/", {}, format="json")

        response = client.get(f"/api/appointments/{self.appointment.id}/applications/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        statuses = sorted(item["status"] for item in response.data)
        self.assertEqual(statuses, [VaccineApplication.STATUS_CANCELLED, VaccineApplication.STATUS_PENDING])

    def test_application_history_missing(self):
        client = self._client_for(self.auditor)
        response = client.get("/api/appointments/999999/applications/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
