import random
from datetime import date, timedelta

from django.db import transaction

from .models import Guardian, Patient

RANDOM_SEED = 42

FIRST_NAMES = ["Mateo", "Valentina", "Thiago", "Emma", "Benjamin", "Sofia", "Lorenzo", "Martina", "Bautista", "Isabella"]
LAST_NAMES = ["Gonzalez", "Rodriguez", "Fernandez", "Lopez", "Martinez", "Perez", "Gomez", "Diaz"]


def seed_patients(flush: bool = False, count: int = 30) -> dict:
    """
    Seedet:
    - Tutoren (Guardian)
    - Patienten mit zugeordnetem Tutor

    Wenn flush=True werden nur Seed-Datensätze (Dokumentnummer 'SEED-*')
    gelöscht; Patienten mit Impfterminen bleiben erhalten (PROTECT).
    """
    random.seed(RANDOM_SEED)
    stats: dict[str, int] = {}

    with transaction.atomic():
        if flush:
            Patient.objects.filter(document_number__startswith="SEED-", appointments__isnull=True).delete()
            Guardian.objects.filter(document_number__startswith="SEED-", appointments__isnull=True, patients__isnull=True).delete()

        guardians = _seed_guardians(count // 2 or 1)
        stats["patients_guardians"] = len(guardians)

        patients = _seed_patients(guardians, count)
        stats["patients_patients"] = len(patients)

    return stats


def _seed_guardians(count: int) -> list[Guardian]:
    guardians: list[Guardian] = []
    for i in range(count):
        guardian, _created = Guardian.objects.get_or_create(
            document_number=f"SEED-G{i + 1:04d}",
            defaults={
                "first_name": random.choice(FIRST_NAMES),
                "last_name": random.choice(LAST_NAMES),
                "phone": f"+54 11 {random.randint(4000, 6999)}-{random.randint(1000, 9999)}",
                "relationship": random.choice(["mother", "father", "legal guardian"]),
            },
        )
        guardians.append(guardian)
    return guardians


def _seed_patients(guardians: list[Guardian], count: int) -> list[Patient]:
    today = date.today()
    patients: list[Patient] = []
    for i in range(count):
        guardian = guardians[i % len(guardians)]
        patient, _created = Patient.objects.get_or_create(
            document_number=f"SEED-P{i + 1:04d}",
            defaults={
                "first_name": random.choice(FIRST_NAMES),
                "last_name": guardian.last_name,
                "birth_date": today - timedelta(days=random.randint(60, 365 * 12)),
                "guardian": guardian,
            },
        )
        patients.append(patient)
    return patients
