"""
Appointments App Configuration
"""

from django.apps import AppConfig


class AppointmentsConfig(AppConfig):
    """Standard App-Konfiguration für Impftermine & Applikationen"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'vaxi_backend.appointments'
    verbose_name = 'Appointments (Vaccination Appointments & Applications)'
