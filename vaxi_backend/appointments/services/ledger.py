"""
Application Ledger.

Creates and cancels vaccine applications. This is the single place where an
application's status changes, so the ledger rules hold everywhere:

- applications are created ``pending``
- lot and dose never change after insert
- cancelling never returns the unit to the lot and never hands the dose
  ordinal to another application
- cancelling an already cancelled application is a no-op

Database failures are re-raised as ``PersistenceError`` after the savepoint
of the failing write has been rolled back; an enclosing transaction (the
scheduler's) is rolled back in turn because the exception propagates.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import DatabaseError, transaction
from django.utils import timezone

from vaxi_backend.appointments.exceptions import (
    AppointmentNotFound,
    PersistenceError,
    ValidationFailed,
)
from vaxi_backend.appointments.models import Appointment, VaccineApplication
from vaxi_backend.inventory.models import InventoryLot

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractUser

logger = logging.getLogger(__name__)


def create_application(
    *,
    lot: InventoryLot,
    dose: int,
    agent: 'AbstractUser | None' = None,
    appointment: Appointment | None = None,
) -> VaccineApplication:
    """
    Create a pending application bound to ``lot`` with dose ordinal ``dose``.

    The unit has already been taken from the lot by ``reserve_lot``; both
    must run inside the same transaction.

    Raises:
        ValidationFailed: If dose is not a positive integer
        PersistenceError: If the insert fails
    """
    if isinstance(dose, bool) or not isinstance(dose, int) or dose < 1:
        raise ValidationFailed('dose must be a positive integer', field='dose')

    try:
        with transaction.atomic(using='default'):
            application = VaccineApplication.objects.using('default').create(
                lot=lot,
                dose=dose,
                agent=agent,
                appointment=appointment,
                status=VaccineApplication.STATUS_PENDING,
            )
    except DatabaseError as exc:
        logger.exception('Creating application failed (lot_id=%s, dose=%s)', lot.id, dose)
        raise PersistenceError('The vaccine application could not be stored', cause=exc) from exc

    logger.info(
        'Created application #%s (lot_id=%s, dose=%s, agent_id=%s)',
        application.id,
        lot.id,
        dose,
        getattr(agent, 'id', None),
    )
    return application


def cancel_application(application: VaccineApplication | int) -> VaccineApplication:
    """
    Move a pending application to ``cancelled``.

    Idempotent: an already cancelled application is returned unchanged.

    Args:
        application: VaccineApplication instance or ID

    Returns:
        The application as stored after the call

    Raises:
        AppointmentNotFound: If the application does not exist
        ValidationFailed: If the application is already completed
        PersistenceError: If the update fails
    """
    application_id = getattr(application, 'id', application)

    try:
        with transaction.atomic(using='default'):
            changed = (
                VaccineApplication.objects.using('default')
                .filter(id=application_id, status=VaccineApplication.STATUS_PENDING)
                .update(
                    status=VaccineApplication.STATUS_CANCELLED,
                    cancelled_at=timezone.now(),
                )
            )
            current = VaccineApplication.objects.using('default').filter(id=application_id).first()
    except DatabaseError as exc:
        logger.exception('Cancelling application #%s failed', application_id)
        raise PersistenceError('The vaccine application could not be cancelled', cause=exc) from exc

    if current is None:
        raise AppointmentNotFound(object_id=application_id, model='VaccineApplication')

    if changed:
        logger.info('Cancelled application #%s (lot_id=%s, dose=%s)', current.id, current.lot_id, current.dose)
    elif current.status == VaccineApplication.STATUS_COMPLETED:
        raise ValidationFailed(
            f'Application #{application_id} is completed and cannot be cancelled',
            field='application',
        )
    else:
        logger.debug('Application #%s already cancelled, nothing to do', application_id)

    return current


def attach_to_appointment(application: VaccineApplication, appointment: Appointment) -> VaccineApplication:
    """Record ``appointment`` as the owner of ``application`` in the history."""
    try:
        VaccineApplication.objects.using('default').filter(id=application.id).update(appointment=appointment)
    except DatabaseError as exc:
        logger.exception('Linking application #%s to appointment #%s failed', application.id, appointment.id)
        raise PersistenceError('The vaccine application could not be linked', cause=exc) from exc

    application.appointment = appointment
    return application
