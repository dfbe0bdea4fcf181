"""Vaccine inventory: catalog reference data and lots.

Catalog management and lot replenishment happen outside of this service.
The only write performed here at runtime is the conditional decrement of
``InventoryLot.remaining_quantity`` in ``inventory.services.lots.reserve_lot``.
"""

from django.db import models


class Laboratory(models.Model):
	"""Producer of vaccine lots."""

	name = models.CharField(max_length=255, unique=True)
	country = models.CharField(max_length=100, blank=True, default='')
	created_at = models.DateTimeField(auto_now_add=True)

	class Meta:
		ordering = ['name', 'id']
		verbose_name_plural = 'Laboratories'

	def __str__(self) -> str:
		return self.name


class VaccineType(models.Model):
	"""A kind of vaccine patients can be booked for (e.g. MMR, Hepatitis B)."""

	name = models.CharField(max_length=150, unique=True)
	description = models.TextField(blank=True, default='')
	active = models.BooleanField(default=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['name', 'id']

	def __str__(self) -> str:
		return self.name


class InventoryLot(models.Model):
	"""A batch of vaccine units of one type delivered by a laboratory.

	Invariant: ``remaining_quantity`` never drops below zero (enforced by the
	conditional decrement and a database check constraint). Lot selection is
	deterministic: lowest ``id`` with stock first.
	"""

	vaccine_type = models.ForeignKey(
		VaccineType,
		on_delete=models.PROTECT,
		related_name='lots',
	)
	laboratory = models.ForeignKey(
		Laboratory,
		on_delete=models.PROTECT,
		related_name='lots',
	)
	lot_number = models.CharField(max_length=64)
	remaining_quantity = models.PositiveIntegerField(default=0)
	expires_on = models.DateField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['id']
		constraints = [
			models.CheckConstraint(
				condition=models.Q(remaining_quantity__gte=0),
				name='inventory_lot_remaining_non_negative',
			),
			models.UniqueConstraint(
				fields=['laboratory', 'lot_number'],
				name='inventory_lot_unique_per_laboratory',
			),
		]

	def __str__(self) -> str:
		return f"Lot {self.lot_number} ({self.vaccine_type_id}) remaining={self.remaining_quantity}"
