"""
Inventory Services Module.

This package contains service-layer logic for the inventory app:
- lots: Inventory Lot Store (lot reservation with conditional decrement)
"""

from vaxi_backend.inventory.services.lots import available_stock, reserve_lot

__all__ = [
    "available_stock",
    "reserve_lot",
]
