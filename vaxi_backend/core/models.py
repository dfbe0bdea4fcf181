from django.contrib.auth.models import AbstractUser
from django.db import models
from django.conf import settings


class Role(models.Model):
    """RBAC role of an operator.

    nurse and reception book and reschedule, auditor only reads, admin does both.
    """

    name = models.CharField(max_length=64, unique=True, db_index=True)
    label = models.CharField(max_length=128)

    class Meta:
        db_table = 'core_role'
        ordering = ['name']
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self) -> str:
        return self.label


class User(AbstractUser):
    """Operator account: the person who books and reschedules vaccinations.

    The operator of a booking is the authenticated user itself
    (``appointments.services.scheduling.resolve_operator`` looks it up by id)
    and ends up as ``agent`` on the appointment and on the application.

    - role: RBAC role (admin, nurse, reception, auditor)
    - license_number: professional registration number of vaccinating staff;
      descriptive, shown with the agent and copied into audit entries
    - email: unique, used as login identifier by the token issuer
    """

    email = models.EmailField('email address', blank=True, unique=True)
    license_number = models.CharField(max_length=32, blank=True, default='', db_index=True)
    role = models.ForeignKey(
        Role,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='users',
    )

    class Meta:
        db_table = 'core_user'
        ordering = ['username']
        verbose_name = 'Operator'
        verbose_name_plural = 'Operators'


class AuditLog(models.Model):
    """Trail of who touched which patient's vaccination record, and when.

    Booking and rescheduling write one entry each after their transaction
    commits; ``meta`` carries the appointment, application, lot and dose
    involved (plus the superseded application on reschedule). Reads of
    appointments are logged too.

    ``patient_id`` is a plain integer so entries outlive the patient row.
    """

    ACTION_APPOINTMENT_BOOK = 'appointment_book'
    ACTION_APPOINTMENT_RESCHEDULE = 'appointment_reschedule'
    ACTION_APPOINTMENT_LIST = 'appointment_list'
    ACTION_APPOINTMENT_VIEW = 'appointment_view'

    ACTION_CHOICES = (
        (ACTION_APPOINTMENT_BOOK, 'Vaccination booked'),
        (ACTION_APPOINTMENT_RESCHEDULE, 'Vaccination rescheduled'),
        (ACTION_APPOINTMENT_LIST, 'Appointments listed'),
        (ACTION_APPOINTMENT_VIEW, 'Appointment viewed'),
    )
    ACTIONS = frozenset(code for code, _label in ACTION_CHOICES)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    role_name = models.CharField(max_length=50, db_index=True)
    action = models.CharField(max_length=50, choices=ACTION_CHOICES, db_index=True)
    patient_id = models.IntegerField(null=True, blank=True, db_index=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    meta = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'core_auditlog'
        ordering = ['-timestamp', '-id']
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        indexes = [
            models.Index(fields=['action', 'timestamp'], name='core_auditl_action_8d1c2e_idx'),
            models.Index(fields=['patient_id', 'timestamp'], name='core_auditl_patient_5b7f0a_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.get_action_display()} (patient_id={self.patient_id}, role={self.role_name or '-'})"
