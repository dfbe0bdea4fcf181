"""
Patients App Configuration
"""

from django.apps import AppConfig


class PatientsConfig(AppConfig):
    """Standard App-Konfiguration für Patienten & Tutoren"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'vaxi_backend.patients'
    verbose_name = 'Patients (Patients & Guardians)'
