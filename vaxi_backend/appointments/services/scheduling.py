"""
Appointment Scheduler for VaxiApp.

This service layer composes the Inventory Lot Store, the Dose Sequencer and
the Application Ledger to book and reschedule vaccination appointments.
Views should delegate to these functions rather than implementing business
logic directly.

Architecture Rules:
- All DB access uses .using('default')
- Each booking/reschedule runs in exactly one transaction.atomic() scope:
  lot reservation, dose computation, application create/cancel and the
  appointment write succeed or fail together
- The patient row is locked for the whole scope so two bookings for the same
  patient cannot compute the same dose ordinal
- All exceptions are custom types from appointments.exceptions
- Views translate exceptions to appropriate DRF responses

Operator identity: the acting operator is resolved from the caller on both
booking and reschedule and recorded on the appointment and on the
application it creates.

Inventory: a reschedule takes a fresh unit and does not return the unit of
the superseded application. Every reschedule therefore consumes one more unit
than a plain edit would.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from vaxi_backend.appointments.exceptions import (
    AppointmentNotFound,
    PersistenceError,
    ValidationFailed,
)
from vaxi_backend.appointments.models import Appointment
from vaxi_backend.appointments.services.dosing import next_dose
from vaxi_backend.appointments.services.ledger import (
    attach_to_appointment,
    cancel_application,
    create_application,
)
from vaxi_backend.core.models import AuditLog, User
from vaxi_backend.core.utils import log_patient_action
from vaxi_backend.inventory.models import VaccineType
from vaxi_backend.inventory.services.lots import reserve_lot
from vaxi_backend.patients.models import Guardian, Patient

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractUser

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input Helpers
# ---------------------------------------------------------------------------

def _parse_id(data: dict, key: str, *, required: bool = True) -> int | None:
    """Read a positive integer ID from ``data``."""
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise ValidationFailed(f'{key} is required', field=key)
        return None
    if isinstance(value, bool):
        raise ValidationFailed(f'{key} must be an integer', field=key)
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f'{key} must be an integer', field=key)
    if value <= 0:
        raise ValidationFailed(f'{key} must be positive', field=key)
    return value


def _parse_scheduled_at(value: Any, *, required: bool = True) -> datetime | None:
    """Accept a datetime or an ISO 8601 string; naive values use the current timezone."""
    if value is None or value == '':
        if required:
            raise ValidationFailed('scheduled_at is required', field='scheduled_at')
        return None

    if isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationFailed('scheduled_at must be an ISO 8601 datetime', field='scheduled_at')
        value = parsed

    if not isinstance(value, datetime):
        raise ValidationFailed('scheduled_at must be an ISO 8601 datetime', field='scheduled_at')

    if timezone.is_naive(value):
        value = timezone.make_aware(value, timezone.get_current_timezone())
    return value


def _resolve_patient(patient_id: int) -> Patient:
    patient = Patient.objects.using('default').filter(id=patient_id).first()
    if patient is None:
        raise ValidationFailed(f'Patient with ID {patient_id} not found', field='patient_id')
    return patient


def _resolve_vaccine_type(vaccine_type_id: int) -> VaccineType:
    vaccine_type = VaccineType.objects.using('default').filter(id=vaccine_type_id, active=True).first()
    if vaccine_type is None:
        raise ValidationFailed(
            f'Vaccine type with ID {vaccine_type_id} not found or inactive',
            field='vaccine_type_id',
        )
    return vaccine_type


def _resolve_guardian(guardian_id: int) -> Guardian:
    guardian = Guardian.objects.using('default').filter(id=guardian_id).first()
    if guardian is None:
        raise ValidationFailed(f'Guardian with ID {guardian_id} not found', field='guardian_id')
    return guardian


def resolve_operator(user: 'AbstractUser | None') -> User | None:
    """
    Resolve the acting operator from the authenticated caller.

    Returns None for anonymous or inactive callers; the booking then has no
    agent recorded.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return User.objects.using('default').filter(id=user.id, is_active=True).first()


# ---------------------------------------------------------------------------
# Persistence Helpers
# ---------------------------------------------------------------------------

def _lock_patient(patient_id: int) -> None:
    """Serialize scheduling for one patient until the transaction ends."""
    Patient.objects.using('default').select_for_update().filter(id=patient_id).first()


def _persist_appointment(appointment: Appointment) -> Appointment:
    appointment.save(using='default')
    return appointment


# ---------------------------------------------------------------------------
# Main Entry Points
# ---------------------------------------------------------------------------

def book_appointment(*, data: dict, user: 'AbstractUser | None') -> Appointment:
    """
    Book a vaccination appointment (BookAppointment).

    Steps, all inside one transaction:
    1. Lock the patient
    2. Reserve one unit from a lot of the vaccine type
    3. Compute the next dose ordinal
    4. Create a pending application bound to the lot and dose
    5. Persist the appointment pointing to the application

    Args:
        data: Dictionary with appointment data:
            - patient_id: int (required)
            - vaccine_type_id: int (required)
            - guardian_id: int (required)
            - scheduled_at: datetime or ISO string (required)
            - notes: str (optional)
        user: The authenticated operator (agent + audit logging)

    Returns:
        The created Appointment instance

    Raises:
        ValidationFailed: If required data is missing or invalid
        NoStockAvailable: If no lot of the vaccine type has stock
        PersistenceError: If the store fails; nothing is left behind
    """
    patient = _resolve_patient(_parse_id(data, 'patient_id'))
    vaccine_type = _resolve_vaccine_type(_parse_id(data, 'vaccine_type_id'))
    guardian = _resolve_guardian(_parse_id(data, 'guardian_id'))
    scheduled_at = _parse_scheduled_at(data.get('scheduled_at'))
    notes = (data.get('notes') or '').strip()
    operator = resolve_operator(user)

    try:
        with transaction.atomic(using='default'):
            _lock_patient(patient.id)

            lot = reserve_lot(vaccine_type=vaccine_type)
            dose = next_dose(patient=patient, vaccine_type=vaccine_type)
            application = create_application(lot=lot, dose=dose, agent=operator)

            appointment = _persist_appointment(Appointment(
                patient=patient,
                vaccine_type=vaccine_type,
                guardian=guardian,
                agent=operator,
                application=application,
                scheduled_at=scheduled_at,
                notes=notes,
            ))
            attach_to_appointment(application, appointment)
    except DatabaseError as exc:
        logger.exception('Booking failed for patient_id=%s, vaccine_type_id=%s', patient.id, vaccine_type.id)
        raise PersistenceError('The appointment could not be booked', cause=exc) from exc

    logger.info(
        'Booked appointment #%s (patient_id=%s, application #%s, lot #%s, dose %s)',
        appointment.id,
        patient.id,
        application.id,
        lot.id,
        dose,
    )
    log_patient_action(user, AuditLog.ACTION_APPOINTMENT_BOOK, patient.id, meta={
        'appointment_id': appointment.id,
        'application_id': application.id,
        'lot_id': lot.id,
        'dose': dose,
    })
    return appointment


def reschedule_appointment(
    *,
    appointment_id: int,
    data: dict | None,
    user: 'AbstractUser | None',
) -> Appointment:
    """
    Reschedule an existing appointment (RescheduleAppointment).

    The current application is superseded: a new unit is reserved (possibly
    from a different lot), the old application is cancelled and a new pending
    one becomes the appointment's current application. The old unit is not
    returned to its lot.

    Dose: within the same vaccine type the new application takes over the
    ordinal of the one it supersedes, whatever other doses the patient has.
    When the vaccine type changes the ordinal is the next one for the new type.

    Args:
        appointment_id: ID of the appointment to reschedule
        data: Dictionary with the fields to change (all optional):
            - vaccine_type_id: int
            - guardian_id: int
            - scheduled_at: datetime or ISO string
            - notes: str
            - patient_id: int (must match the appointment's patient)
        user: The authenticated operator (agent + audit logging)

    Returns:
        The updated Appointment instance

    Raises:
        ValidationFailed: If data is invalid
        AppointmentNotFound: If the appointment (or its application) is missing
        NoStockAvailable: If no lot of the vaccine type has stock
        PersistenceError: If the store fails; nothing is changed
    """
    data = data or {}
    appointment_id = _parse_id({'id': appointment_id}, 'id')
    patient_id = _parse_id(data, 'patient_id', required=False)

    vaccine_type_id = _parse_id(data, 'vaccine_type_id', required=False)
    vaccine_type = _resolve_vaccine_type(vaccine_type_id) if vaccine_type_id else None

    guardian_id = _parse_id(data, 'guardian_id', required=False)
    guardian = _resolve_guardian(guardian_id) if guardian_id else None

    scheduled_at = _parse_scheduled_at(data.get('scheduled_at'), required=False)
    notes = data.get('notes')
    operator = resolve_operator(user)

    try:
        with transaction.atomic(using='default'):
            appointment = (
                Appointment.objects.using('default')
                .select_for_update()
                .filter(id=appointment_id)
                .first()
            )
            if appointment is None:
                raise AppointmentNotFound(object_id=appointment_id)
            if patient_id is not None and patient_id != appointment.patient_id:
                raise ValidationFailed('patient_id cannot change on reschedule', field='patient_id')

            _lock_patient(appointment.patient_id)

            previous = appointment.application
            if previous is None:
                raise AppointmentNotFound(
                    object_id=appointment.id,
                    model='VaccineApplication',
                    message=f'Appointment #{appointment.id} has no current application',
                )

            target_type = vaccine_type or appointment.vaccine_type
            lot = reserve_lot(vaccine_type=target_type)
            if previous.lot.vaccine_type_id == target_type.id:
                dose = previous.dose
            else:
                dose = next_dose(
                    patient=appointment.patient_id,
                    vaccine_type=target_type,
                    exclude_application_id=previous.id,
                )
            cancel_application(previous)
            application = create_application(
                lot=lot,
                dose=dose,
                agent=operator,
                appointment=appointment,
            )

            appointment.application = application
            appointment.vaccine_type = target_type
            appointment.agent = operator
            if guardian is not None:
                appointment.guardian = guardian
            if scheduled_at is not None:
                appointment.scheduled_at = scheduled_at
            if notes is not None:
                appointment.notes = str(notes).strip()
            _persist_appointment(appointment)
    except DatabaseError as exc:
        logger.exception('Reschedule failed for appointment #%s', appointment_id)
        raise PersistenceError('The appointment could not be rescheduled', cause=exc) from exc

    logger.info(
        'Rescheduled appointment #%s: application #%s cancelled, #%s created (lot #%s, dose %s)',
        appointment.id,
        previous.id,
        application.id,
        lot.id,
        dose,
    )
    log_patient_action(user, AuditLog.ACTION_APPOINTMENT_RESCHEDULE, appointment.patient_id, meta={
        'appointment_id': appointment.id,
        'previous_application_id': previous.id,
        'application_id': application.id,
        'lot_id': lot.id,
        'dose': dose,
    })
    return appointment
