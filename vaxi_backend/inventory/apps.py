"""
Inventory App Configuration
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """Standard App-Konfiguration für Impfstoff-Lager"""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'vaxi_backend.inventory'
    verbose_name = 'Inventory (Vaccine Types & Lots)'
