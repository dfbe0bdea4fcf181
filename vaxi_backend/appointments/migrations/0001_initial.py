from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		migrations.swappable_dependency(settings.AUTH_USER_MODEL),
		("inventory", "0001_initial"),
		("patients", "0001_initial"),
	]

	operations = [
		migrations.CreateModel(
			name="VaccineApplication",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("dose", models.PositiveSmallIntegerField()),
				(
					"status",
					models.CharField(
						choices=[("pending", "pending"), ("cancelled", "cancelled"), ("completed", "completed")],
						default="pending",
						max_length=20,
					),
				),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("cancelled_at", models.DateTimeField(blank=True, null=True)),
				(
					"agent",
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name="vaccine_applications",
						to=settings.AUTH_USER_MODEL,
					),
				),
				(
					"lot",
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name="applications",
						to="inventory.inventorylot",
					),
				),
			],
			options={
				"ordering": ["-created_at", "-id"],
				"constraints": [
					models.CheckConstraint(
						condition=models.Q(dose__gte=1),
						name="vaccine_application_dose_positive",
					),
				],
			},
		),
		migrations.CreateModel(
			name="Appointment",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("scheduled_at", models.DateTimeField()),
				("notes", models.TextField(blank=True, default="")),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				(
					"agent",
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name="booked_appointments",
						to=settings.AUTH_USER_MODEL,
					),
				),
				(
					"application",
					models.OneToOneField(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.PROTECT,
						related_name="current_for",
						to="appointments.vaccineapplication",
					),
				),
				(
					"guardian",
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name="appointments",
						to="patients.guardian",
					),
				),
				(
					"patient",
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name="appointments",
						to="patients.patient",
					),
				),
				(
					"vaccine_type",
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name="appointments",
						to="inventory.vaccinetype",
					),
				),
			],
			options={
				"ordering": ["-scheduled_at", "-id"],
			},
		),
		migrations.AddField(
			model_name="vaccineapplication",
			name="appointment",
			field=models.ForeignKey(
				blank=True,
				null=True,
				on_delete=django.db.models.deletion.SET_NULL,
				related_name="applications",
				to="appointments.appointment",
			),
		),
	]
