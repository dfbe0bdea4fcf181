"""Shared reference data for the appointments test modules."""

from __future__ import annotations

import threading
from datetime import date, timedelta

from django.db import connection
from django.utils import timezone

from vaxi_backend.core.models import Role, User
from vaxi_backend.inventory.models import InventoryLot, Laboratory, VaccineType
from vaxi_backend.patients.models import Guardian, Patient


class VaccinationFixturesMixin:
    """Creates roles, operators, a patient with guardian, vaccine types and lots."""

    def setUp(self):
        self.role_admin, _ = Role.objects.using("default").get_or_create(
            name="admin",
            defaults={"label": "Administrator"},
        )
        self.role_nurse, _ = Role.objects.using("default").get_or_create(
            name="nurse",
            defaults={"label": "Impfpersonal"},
        )
        self.role_reception, _ = Role.objects.using("default").get_or_create(
            name="reception",
            defaults={"label": "Empfang"},
        )
        self.role_auditor, _ = Role.objects.using("default").get_or_create(
            name="auditor",
            defaults={"label": "Audit"},
        )

        self.admin = User.objects.db_manager("default").create_user(
            username="admin_vax_test",
            email="admin_vax@example.com",
            password="DummyPass123!",
            role=self.role_admin,
        )
        self.nurse = User.objects.db_manager("default").create_user(
            username="nurse_vax_test",
            email="nurse_vax@example.com",
            password="DummyPass123!",
            role=self.role_nurse,
            license_number="MP-12345",
        )
        self.nurse2 = User.objects.db_manager("default").create_user(
            username="nurse2_vax_test",
            email="nurse2_vax@example.com",
            password="DummyPass123!",
            role=self.role_nurse,
        )
        self.reception = User.objects.db_manager("default").create_user(
            username="reception_vax_test",
            email="reception_vax@example.com",
            password="DummyPass123!",
            role=self.role_reception,
        )
        self.auditor = User.objects.db_manager("default").create_user(
            username="auditor_vax_test",
            email="auditor_vax@example.com",
            password="DummyPass123!",
            role=self.role_auditor,
        )

        self.guardian = Guardian.objects.using("default").create(
            first_name="Maria",
            last_name="Gomez",
            document_number="G-1000",
            relationship="mother",
        )
        self.guardian2 = Guardian.objects.using("default").create(
            first_name="Jorge",
            last_name="Gomez",
            document_number="G-1001",
            relationship="father",
        )
        self.patient = Patient.objects.using("default").create(
            first_name="Mateo",
            last_name="Gomez",
            document_number="P-2000",
            birth_date=date(2022, 3, 14),
            guardian=self.guardian,
        )
        self.patient2 = Patient.objects.using("default").create(
            first_name="Emma",
            last_name="Diaz",
            document_number="P-2001",
            birth_date=date(2021, 7, 1),
        )

        self.lab = Laboratory.objects.using("default").create(name="Lab Test", country="AR")
        self.mmr = VaccineType.objects.using("default").create(name="MMR")
        self.flu = VaccineType.objects.using("default").create(name="Influenza")
        self.retired = VaccineType.objects.using("default").create(name="Retired", active=False)

        self.lot_mmr = self.make_lot(self.mmr, "MMR-1", 5)
        self.lot_flu = self.make_lot(self.flu, "FLU-1", 3)

        self.scheduled_at = (timezone.now() + timedelta(days=1)).replace(microsecond=0)

    def make_lot(self, vaccine_type, number, quantity):
        return InventoryLot.objects.using("default").create(
            vaccine_type=vaccine_type,
            laboratory=self.lab,
            lot_number=number,
            remaining_quantity=quantity,
        )

    def booking_data(self, **overrides):
        data = {
            "patient_id": self.patient.id,
            "vaccine_type_id": self.mmr.id,
            "guardian_id": self.guardian.id,
            "scheduled_at": self.scheduled_at,
            "notes": "",
        }
        data.update(overrides)
        return data

    def remaining(self, lot):
        return InventoryLot.objects.using("default").get(id=lot.id).remaining_quantity


def run_concurrently(*targets, timeout=60):
    """Start every callable in its own thread at the same moment and wait for all.

    Each thread closes its database connection when done. Returns the values
    (or raised exceptions) in the order of ``targets``.
    """
    barrier = threading.Barrier(len(targets))
    results = [None] * len(targets)

    def runner(index, target):
        try:
            barrier.wait()
            try:
                results[index] = target()
            except Exception as exc:
                results[index] = exc
        finally:
            connection.close()

    threads = [threading.Thread(target=runner, args=(i, t)) for i, t in enumerate(targets)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout)
    return results
