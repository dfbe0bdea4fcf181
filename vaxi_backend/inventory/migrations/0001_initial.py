from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

	initial = True

	dependencies = []

	operations = [
		migrations.CreateModel(
			name="Laboratory",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("name", models.CharField(max_length=255, unique=True)),
				("country", models.CharField(blank=True, default="", max_length=100)),
				("created_at", models.DateTimeField(auto_now_add=True)),
			],
			options={
				"verbose_name_plural": "Laboratories",
				"ordering": ["name", "id"],
			},
		),
		migrations.CreateModel(
			name="VaccineType",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("name", models.CharField(max_length=150, unique=True)),
				("description", models.TextField(blank=True, default="")),
				("active", models.BooleanField(default=True)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
			],
			options={
				"ordering": ["name", "id"],
			},
		),
		migrations.CreateModel(
			name="InventoryLot",
			fields=[
				("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
				("lot_number", models.CharField(max_length=64)),
				("remaining_quantity", models.PositiveIntegerField(default=0)),
				("expires_on", models.DateField(blank=True, null=True)),
				("created_at", models.DateTimeField(auto_now_add=True)),
				("updated_at", models.DateTimeField(auto_now=True)),
				(
					"laboratory",
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name="lots",
						to="inventory.laboratory",
					),
				),
				(
					"vaccine_type",
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name="lots",
						to="inventory.vaccinetype",
					),
				),
			],
			options={
				"ordering": ["id"],
				"constraints": [
					models.CheckConstraint(
						condition=models.Q(remaining_quantity__gte=0),
						name="inventory_lot_remaining_non_negative",
					),
					models.UniqueConstraint(
						fields=("laboratory", "lot_number"),
						name="inventory_lot_unique_per_laboratory",
					),
				],
			},
		),
	]
