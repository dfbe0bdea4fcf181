"""
Inventory Lot Store.

Reservation is the atomic act of selecting a lot with available stock and
taking one unit from it. Selection and decrement are never split into a
read-then-write: the decrement is a conditional ``UPDATE`` guarded by
``remaining_quantity > 0``, so two concurrent reservations against the last
unit of a lot cannot both succeed.

Selection policy: lowest lot ``id`` with stock first. This is deterministic
but not FIFO/FEFO by expiry date.

Architecture Rules:
- All DB access uses .using('default')
- The decrement only happens here; callers wrap the reservation in their own
  transaction so it is undone when the booking fails later on
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from vaxi_backend.appointments.exceptions import NoStockAvailable
from vaxi_backend.inventory.models import InventoryLot, VaccineType

logger = logging.getLogger(__name__)


def _vaccine_type_id(vaccine_type: VaccineType | int) -> int:
    return getattr(vaccine_type, 'id', vaccine_type)


def _candidate_lot_ids(vaccine_type_id: int) -> list[int]:
    return list(
        InventoryLot.objects.using('default')
        .filter(vaccine_type_id=vaccine_type_id, remaining_quantity__gt=0)
        .order_by('id')
        .values_list('id', flat=True)
    )


def reserve_lot(*, vaccine_type: VaccineType | int) -> InventoryLot:
    """
    Take one unit from the first lot of ``vaccine_type`` that still has stock.

    If a candidate is drained by a concurrent reservation between the read of
    the candidates and the conditional update, the next candidate is tried.

    Args:
        vaccine_type: VaccineType instance or its ID

    Returns:
        The reserved InventoryLot, reloaded after the decrement

    Raises:
        NoStockAvailable: If no lot of the vaccine type has units left
    """
    vaccine_type_id = _vaccine_type_id(vaccine_type)

    with transaction.atomic(using='default'):
        for lot_id in _candidate_lot_ids(vaccine_type_id):
            taken = (
                InventoryLot.objects.using('default')
                .filter(id=lot_id, remaining_quantity__gt=0)
                .update(
                    remaining_quantity=F('remaining_quantity') - 1,
                    updated_at=timezone.now(),
                )
            )
            if not taken:
                logger.debug('Lot #%s drained concurrently, trying next candidate', lot_id)
                continue

            lot = (
                InventoryLot.objects.using('default')
                .select_related('vaccine_type', 'laboratory')
                .get(id=lot_id)
            )
            logger.info(
                'Reserved one unit from lot #%s (%s), %s left',
                lot.id,
                lot.lot_number,
                lot.remaining_quantity,
            )
            return lot

    logger.info('No stock available for vaccine_type_id=%s', vaccine_type_id)
    raise NoStockAvailable(vaccine_type_id=vaccine_type_id)


def available_stock(*, vaccine_type: VaccineType | int) -> int:
    """Total remaining units across all lots of a vaccine type."""
    total = (
        InventoryLot.objects.using('default')
        .filter(vaccine_type_id=_vaccine_type_id(vaccine_type))
        .aggregate(total=Sum('remaining_quantity'))['total']
    )
    return total or 0
