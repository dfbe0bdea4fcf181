"""
Vaccination-specific exceptions for the appointments app.

These exceptions are raised by the service layer (inventory lots, dose
sequencing, application ledger, scheduling) and are translated to
appropriate DRF responses in the views.

Every exception carries a stable machine ``code`` and a human-readable
message, so callers can tell business-rule failures ("no stock") apart
from infrastructure failures.
"""

from __future__ import annotations

from typing import Any


class VaccinationError(Exception):
    """Base exception for all vaccination scheduling errors."""

    code = 'vaccination_error'

    def __init__(self, message: str = "Vaccination scheduling failed"):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            'detail': self.message,
            'code': self.code,
        }


class NoStockAvailable(VaccinationError):
    """
    Raised when no inventory lot of the requested vaccine type has units left.

    Never retried: stock does not appear in the middle of a request.
    """

    code = 'no_stock_available'

    def __init__(
        self,
        *,
        vaccine_type_id: int,
        message: str = "No vaccines available for the selected vaccine type",
    ):
        self.vaccine_type_id = vaccine_type_id
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result['vaccine_type_id'] = self.vaccine_type_id
        return result


class ValidationFailed(VaccinationError):
    """
    Raised when input is malformed or a required field is missing.

    Raised before any persistence is attempted.
    """

    code = 'validation_failed'

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result['field'] = self.field
        return result


class AppointmentNotFound(VaccinationError):
    """
    Raised when a reschedule targets an appointment (or application) that no
    longer exists.

    Attributes:
        model: 'Appointment' or 'VaccineApplication'
        object_id: The ID that was looked up
    """

    code = 'appointment_not_found'

    def __init__(
        self,
        *,
        object_id: int | None,
        model: str = 'Appointment',
        message: str | None = None,
    ):
        self.model = model
        self.object_id = object_id
        super().__init__(message or f"{model} #{object_id} not found")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result['model'] = self.model
        if self.object_id is not None:
            result['id'] = self.object_id
        return result


class PersistenceError(VaccinationError):
    """
    Raised when the transactional store fails.

    The transaction has been rolled back in full when this is raised. The
    underlying database exception is kept on ``cause`` (and ``__cause__``)
    for diagnostics but is not exposed to API clients.
    """

    code = 'persistence_error'

    def __init__(self, message: str = "The vaccination record could not be stored", cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)
