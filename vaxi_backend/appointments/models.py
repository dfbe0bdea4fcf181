"""Domain models for vaccination appointments and vaccine applications.

Medical-domain note (critical):

- A ``VaccineApplication`` is one vaccine unit drawn from a lot and assigned to
	a patient with a dose ordinal. Its lot and dose never change after insert;
	correcting a mistake means cancelling it and creating a new one.
- An ``Appointment`` points to exactly one *current* application. On
	reschedule the pointer moves to a new application and the old one is
	cancelled (never deleted).

Architectural note:

- Status transitions go exclusively through ``appointments.services.ledger``.
- All ORM access for these models should use the ``default`` database alias.
"""

from django.conf import settings
from django.db import models
from django.db.models import DEFERRED

from vaxi_backend.appointments.exceptions import ValidationFailed


class VaccineApplication(models.Model):
	"""One vaccine unit drawn from a lot for a patient.

	Lifecycle:
	- created ``pending`` by the ledger
	- ``pending`` -> ``cancelled`` via ``ledger.cancel_application`` only
	- ``completed`` is recorded by the administering workflow (not offered here)

	``appointment`` is a history back-reference: every application ever
	created for an appointment points to it, the current one is
	``Appointment.application``.
	"""
	STATUS_PENDING = 'pending'
	STATUS_CANCELLED = 'cancelled'
	STATUS_COMPLETED = 'completed'

	STATUS_CHOICES = (
		(STATUS_PENDING, STATUS_PENDING),
		(STATUS_CANCELLED, STATUS_CANCELLED),
		(STATUS_COMPLETED, STATUS_COMPLETED),
	)

	IMMUTABLE_FIELDS = ('lot_id', 'dose')

	lot = models.ForeignKey(
		'inventory.InventoryLot',
		on_delete=models.PROTECT,
		related_name='applications',
	)
	agent = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='vaccine_applications',
	)
	appointment = models.ForeignKey(
		'Appointment',
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='applications',
	)
	dose = models.PositiveSmallIntegerField()
	status = models.CharField(
		max_length=20,
		choices=STATUS_CHOICES,
		default=STATUS_PENDING,
	)
	created_at = models.DateTimeField(auto_now_add=True)
	cancelled_at = models.DateTimeField(null=True, blank=True)

	class Meta:
		ordering = ['-created_at', '-id']
		constraints = [
			models.CheckConstraint(
				condition=models.Q(dose__gte=1),
				name='vaccine_application_dose_positive',
			),
		]

	def __str__(self) -> str:
		return f"VaccineApplication #{self.id} (dose={self.dose}, {self.status})"

	@classmethod
	def from_db(cls, db, field_names, values):
		instance = super().from_db(db, field_names, values)
		instance._loaded_values = dict(zip(field_names, values))
		return instance

	def save(self, *args, **kwargs):
		loaded = getattr(self, '_loaded_values', None)
		if not self._state.adding and loaded:
			for attname in self.IMMUTABLE_FIELDS:
				original = loaded.get(attname, DEFERRED)
				if original is not DEFERRED and original != getattr(self, attname):
					raise ValidationFailed(
						f'{attname} of application #{self.pk} is immutable; cancel it and create a new one',
						field=attname,
					)
		super().save(*args, **kwargs)

	@property
	def is_cancelled(self) -> bool:
		return self.status == self.STATUS_CANCELLED


class Appointment(models.Model):
	"""A booked vaccination for a patient.

	Invariant: once created, ``application`` references a non-cancelled
	VaccineApplication. Appointments are never hard-deleted.

	``agent`` is the operator who booked (or last rescheduled) the appointment.
	"""
	patient = models.ForeignKey(
		'patients.Patient',
		on_delete=models.PROTECT,
		related_name='appointments',
	)
	vaccine_type = models.ForeignKey(
		'inventory.VaccineType',
		on_delete=models.PROTECT,
		related_name='appointments',
	)
	guardian = models.ForeignKey(
		'patients.Guardian',
		on_delete=models.PROTECT,
		related_name='appointments',
	)
	agent = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='booked_appointments',
	)
	application = models.OneToOneField(
		VaccineApplication,
		null=True,
		blank=True,
		on_delete=models.PROTECT,
		related_name='current_for',
	)
	scheduled_at = models.DateTimeField()
	notes = models.TextField(blank=True, default='')
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['-scheduled_at', '-id']

	def __str__(self) -> str:
		return f"Appointment #{self.id} (patient_id={self.patient_id})"
