"""
Appointments Services Module.

This package contains service-layer logic for the appointments app:
- dosing: Dose Sequencer (next dose ordinal per patient and vaccine type)
- ledger: Application Ledger (create/cancel vaccine applications)
- scheduling: Appointment Scheduler (book and reschedule appointments)
"""

from vaxi_backend.appointments.services.dosing import dose_history, next_dose
from vaxi_backend.appointments.services.ledger import (
    attach_to_appointment,
    cancel_application,
    create_application,
)
from vaxi_backend.appointments.services.scheduling import (
    book_appointment,
    reschedule_appointment,
    resolve_operator,
)

__all__ = [
    # Dose Sequencer
    "dose_history",
    "next_dose",
    # Application Ledger
    "attach_to_appointment",
    "cancel_application",
    "create_application",
    # Appointment Scheduler
    "book_appointment",
    "reschedule_appointment",
    "resolve_operator",
]
