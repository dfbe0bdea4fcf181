from django.db import models


class Guardian(models.Model):
	"""Legal guardian (tutor) accompanying a patient to a vaccination.

	Reference data: registered outside of this service and only referenced
	by appointments.
	"""

	first_name = models.CharField(max_length=100)
	last_name = models.CharField(max_length=100)
	document_number = models.CharField(max_length=32, unique=True, db_index=True)
	phone = models.CharField(max_length=50, blank=True, default='')
	relationship = models.CharField(max_length=50, blank=True, default='')
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['last_name', 'first_name', 'id']
		verbose_name = 'Guardian'
		verbose_name_plural = 'Guardians'

	def __str__(self) -> str:
		return f"{self.last_name}, {self.first_name}"


class Patient(models.Model):
	"""Person receiving vaccinations.

	The dose history of a patient is derived from the applications reachable
	through the patient's appointments (see ``appointments.services.dosing``).
	"""

	first_name = models.CharField(max_length=100)
	last_name = models.CharField(max_length=100)
	document_number = models.CharField(max_length=32, unique=True, db_index=True)
	birth_date = models.DateField()
	guardian = models.ForeignKey(
		Guardian,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='patients',
	)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['last_name', 'first_name', 'id']
		verbose_name = 'Patient'
		verbose_name_plural = 'Patients'

	def __str__(self) -> str:
		return f"{self.last_name}, {self.first_name} (patient_id={self.id})"
