from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

	initial = True

	dependencies = []

	operations = [
		migrations.CreateModel(
			name="Guardian",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("first_name", models.CharField(max_length=100)),
				("last_name", models.CharField(max_length=100)),
				("document_number", models.CharField(db_index=True, max_length=32, unique=True)),
				("phone", models.CharField(blank=True, default="", max_length=50)),
				("relationship", models.CharField(blank=True, default="", max_length=50)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
			],
			options={
				"verbose_name": "Guardian",
				"verbose_name_plural": "Guardians",
				"ordering": ["last_name", "first_name", "id"],
			},
		),
		migrations.CreateModel(
			name="Patient",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("first_name", models.CharField(max_length=100)),
				("last_name", models.CharField(max_length=100)),
				("document_number", models.CharField(db_index=True, max_length=32, unique=True)),
				("birth_date", models.DateField()),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				(
					"guardian",
					models.ForeignKey(
						blank=True,
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name="patients",
						to="patients.guardian",
					),
				),
			],
			options={
				"verbose_name": "Patient",
				"verbose_name_plural": "Patients",
				"ordering": ["last_name", "first_name", "id"],
			},
		),
	]
