"""
Dose Sequencer.

Computes which dose ordinal a patient is due for next.

Policy:
- Doses are counted per vaccine type (via the lot the application drew from).
- Cancelled applications do not count; their ordinal is free again.
- A reschedule within the same vaccine type reuses the ordinal of the
  superseded application (see ``scheduling.reschedule_appointment``); only a
  change of vaccine type asks for ``next_dose``, with the superseded
  application excluded.

The caller is expected to hold a lock on the patient row (see
``scheduling._lock_patient``) so that two simultaneous bookings for the same
patient cannot compute the same ordinal.
"""

from __future__ import annotations

from django.db.models import Max

from vaxi_backend.appointments.models import VaccineApplication
from vaxi_backend.inventory.models import VaccineType
from vaxi_backend.patients.models import Patient


def _history_queryset(*, patient: Patient | int, vaccine_type: VaccineType | int | None = None):
    patient_id = getattr(patient, 'id', patient)
    qs = (
        VaccineApplication.objects.using('default')
        .filter(appointment__patient_id=patient_id)
        .exclude(status=VaccineApplication.STATUS_CANCELLED)
    )
    if vaccine_type is not None:
        qs = qs.filter(lot__vaccine_type_id=getattr(vaccine_type, 'id', vaccine_type))
    return qs


def dose_history(*, patient: Patient | int, vaccine_type: VaccineType | int | None = None) -> list[VaccineApplication]:
    """Non-cancelled applications of a patient, ordered by dose."""
    return list(
        _history_queryset(patient=patient, vaccine_type=vaccine_type)
        .select_related('lot', 'lot__vaccine_type')
        .order_by('lot__vaccine_type_id', 'dose', 'id')
    )


def next_dose(
    *,
    patient: Patient | int,
    vaccine_type: VaccineType | int,
    exclude_application_id: int | None = None,
) -> int:
    """
    Return the next dose ordinal for ``patient`` and ``vaccine_type``.

    Args:
        patient: Patient instance or ID
        vaccine_type: VaccineType instance or ID
        exclude_application_id: Application being superseded (reschedule)

    Returns:
        ``max(dose) + 1`` over the relevant history, or 1 without history
    """
    qs = _history_queryset(patient=patient, vaccine_type=vaccine_type)
    if exclude_application_id is not None:
        qs = qs.exclude(id=exclude_application_id)

    highest = qs.aggregate(highest=Max('dose'))['highest']
    return (highest or 0) + 1
