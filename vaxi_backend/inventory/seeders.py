import random
from datetime import date, timedelta

from django.db import transaction

from .models import InventoryLot, Laboratory, VaccineType
from .services.lots import available_stock

RANDOM_SEED = 42


def seed_inventory(flush: bool = False) -> dict:
    """
    Seedet:
    - Laboratorien
    - Impfstofftypen
    - Lots (2-3 pro Impfstofftyp und Labor-Kombination)

    Wenn flush=True werden Lots ohne Applikationen gelöscht und neu aufgebaut.
    """
    random.seed(RANDOM_SEED)
    stats: dict[str, int] = {}

    with transaction.atomic():
        if flush:
            InventoryLot.objects.filter(applications__isnull=True).delete()

        laboratories = _seed_laboratories()
        stats["inventory_laboratories"] = len(laboratories)

        vaccine_types = _seed_vaccine_types()
        stats["inventory_vaccine_types"] = len(vaccine_types)

        lots = _seed_lots(vaccine_types, laboratories)
        stats["inventory_lots"] = len(lots)
        stats["inventory_units"] = sum(available_stock(vaccine_type=vt) for vt in vaccine_types)

    return stats


def _seed_laboratories() -> list[Laboratory]:
    definitions = [
        ("Sanofi Pasteur", "France"),
        ("GlaxoSmithKline", "United Kingdom"),
        ("Instituto Butantan", "Brazil"),
    ]
    labs: list[Laboratory] = []
    for name, country in definitions:
        lab, _created = Laboratory.objects.get_or_create(name=name, defaults={"country": country})
        labs.append(lab)
    return labs


def _seed_vaccine_types() -> list[VaccineType]:
    definitions = [
        ("BCG", "Tuberculosis"),
        ("Hepatitis B", "Pediatric hepatitis B"),
        ("Pentavalent", "DTP + Hib + HB"),
        ("MMR", "Measles, mumps and rubella"),
        ("Influenza", "Seasonal influenza"),
    ]
    types: list[VaccineType] = []
    for name, description in definitions:
        vaccine_type, _created = VaccineType.objects.get_or_create(
            name=name,
            defaults={"description": description},
        )
        types.append(vaccine_type)
    return types


def _seed_lots(vaccine_types: list[VaccineType], laboratories: list[Laboratory]) -> list[InventoryLot]:
    today = date.today()
    lots: list[InventoryLot] = []
    for vaccine_type in vaccine_types:
        lab = random.choice(laboratories)
        for n in range(random.randint(2, 3)):
            lot, _created = InventoryLot.objects.get_or_create(
                laboratory=lab,
                lot_number=f"{vaccine_type.name[:3].upper()}-{today.year}-{n + 1:03d}",
                defaults={
                    "vaccine_type": vaccine_type,
                    "remaining_quantity": random.randint(5, 60),
                    "expires_on": today + timedelta(days=random.randint(90, 720)),
                },
            )
            lots.append(lot)
    return lots
