import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def _operator(user):
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return user


def log_patient_action(user, action, patient_id=None, meta=None):
    """Add an entry to the vaccination audit trail (alias: default).

    ``action`` should be one of ``AuditLog.ACTIONS``; anything else is still
    stored but reported as a warning. The operator's role and, for
    vaccinating staff, license number are recorded with the entry.

    Audit failures never abort the booking or reschedule that triggered them;
    they are logged instead.
    """
    if action not in AuditLog.ACTIONS:
        logger.warning('Unknown audit action %r (patient_id=%s)', action, patient_id)

    operator = _operator(user)
    role = getattr(operator, 'role', None)
    role_name = getattr(role, 'name', '') or ''

    license_number = getattr(operator, 'license_number', '') or ''
    if license_number:
        meta = {**(meta or {}), 'license_number': license_number}

    try:
        AuditLog.objects.using('default').create(
            user=operator,
            role_name=role_name,
            action=action,
            patient_id=patient_id,
            meta=meta,
        )
    except Exception:
        logger.exception('AuditLog write failed (action=%s, patient_id=%s)', action, patient_id)
