"""
VaxiApp Seed Command – erzeugt reproduzierbare Testdaten.

Verwendung:
    python manage.py seed           # Seed für alle Apps
    python manage.py seed --flush   # Seed-Datensätze löschen und neu aufbauen

WICHTIG:
- Impftermine und Applikationen werden nie gelöscht; referenzierte Patienten,
  Tutoren und Lots bleiben daher erhalten.
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from vaxi_backend.core.seeders import seed_core
from vaxi_backend.inventory.seeders import seed_inventory
from vaxi_backend.patients.seeders import seed_patients


class Command(BaseCommand):
    help = "Seed database with reference data for VaxiApp"

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete existing seed data before seeding (Impftermine bleiben unangetastet).",
        )

    def handle(self, *args, **options):
        flush = options.get("flush", False)

        self.stdout.write("=" * 80)
        self.stdout.write("  VaxiApp Seed – Testdaten generieren")
        self.stdout.write("=" * 80)

        try:
            with transaction.atomic():
                stats = {}

                # 1. Core (Rollen, Operatoren)
                self.stdout.write("\n[1/3] Seeding Core (Roles, Operators)...")
                core_stats = seed_core(flush=flush)
                stats.update(core_stats)
                self._print_stats(core_stats)

                # 2. Patienten und Tutoren
                self.stdout.write("\n[2/3] Seeding Patients (Guardians, Patients)...")
                patient_stats = seed_patients(flush=flush)
                stats.update(patient_stats)
                self._print_stats(patient_stats)

                # 3. Inventar (Labore, Impfstofftypen, Lots)
                self.stdout.write("\n[3/3] Seeding Inventory (Laboratories, Vaccine Types, Lots)...")
                inventory_stats = seed_inventory(flush=flush)
                stats.update(inventory_stats)
                self._print_stats(inventory_stats)

                self.stdout.write("\n" + "=" * 80)
                self.stdout.write(self.style.SUCCESS("  ✓ Seeding erfolgreich abgeschlossen!"))
                self.stdout.write("=" * 80)
                self._print_summary(stats)

        except Exception as e:
            self.stdout.write(self.style.ERROR(f"\n✗ Fehler beim Seeding: {e}"))
            raise

    def _print_stats(self, stats):
        for key, value in stats.items():
            self.stdout.write(f"  ✓ {key}: {value}")

    def _print_summary(self, stats):
        self.stdout.write("\nErstellte Datensätze (gesamt):")
        for key, value in sorted(stats.items()):
            self.stdout.write(f"  • {key}: {value}")
