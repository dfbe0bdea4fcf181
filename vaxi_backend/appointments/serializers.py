from rest_framework import serializers

from vaxi_backend.core.models import User
from vaxi_backend.inventory.models import InventoryLot, Laboratory, VaccineType
from vaxi_backend.patients.models import Guardian, Patient

from .models import Appointment, VaccineApplication


class LaboratoryNestedSerializer(serializers.ModelSerializer):
    class Meta:
        model = Laboratory
        fields = ['id', 'name', 'country']


class VaccineTypeNestedSerializer(serializers.ModelSerializer):
    class Meta:
        model = VaccineType
        fields = ['id', 'name']


class InventoryLotNestedSerializer(serializers.ModelSerializer):
    laboratory = LaboratoryNestedSerializer(read_only=True)

    class Meta:
        model = InventoryLot
        fields = [
            'id',
            'lot_number',
            'vaccine_type_id',
            'laboratory',
            'expires_on',
        ]


class AgentNestedSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'name', 'license_number']

    def get_name(self, obj):
        return obj.get_full_name() or obj.username


class PatientNestedSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = ['id', 'first_name', 'last_name', 'document_number', 'birth_date']


class GuardianNestedSerializer(serializers.ModelSerializer):
    class Meta:
        model = Guardian
        fields = ['id', 'first_name', 'last_name', 'document_number', 'relationship']


class VaccineApplicationSerializer(serializers.ModelSerializer):
    lot = InventoryLotNestedSerializer(read_only=True)
    agent = AgentNestedSerializer(read_only=True)

    class Meta:
        model = VaccineApplication
        fields = [
            'id',
            'lot',
            'agent',
            'appointment_id',
            'dose',
            'status',
            'created_at',
            'cancelled_at',
        ]


class AppointmentSerializer(serializers.ModelSerializer):
    patient = PatientNestedSerializer(read_only=True)
    vaccine_type = VaccineTypeNestedSerializer(read_only=True)
    guardian = GuardianNestedSerializer(read_only=True)
    agent = AgentNestedSerializer(read_only=True)
    application = VaccineApplicationSerializer(read_only=True)

    class Meta:
        model = Appointment
        fields = [
            'id',
            'patient',
            'vaccine_type',
            'guardian',
            'agent',
            'application',
            'scheduled_at',
            'notes',
            'created_at',
            'updated_at',
        ]


class AppointmentBookSerializer(serializers.Serializer):
    """Input of BookAppointment. Existence checks happen in the service layer."""

    patient_id = serializers.IntegerField(min_value=1)
    vaccine_type_id = serializers.IntegerField(min_value=1)
    guardian_id = serializers.IntegerField(min_value=1)
    scheduled_at = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class AppointmentRescheduleSerializer(serializers.Serializer):
    """Input of RescheduleAppointment. Every field is optional."""

    patient_id = serializers.IntegerField(min_value=1, required=False)
    vaccine_type_id = serializers.IntegerField(min_value=1, required=False)
    guardian_id = serializers.IntegerField(min_value=1, required=False)
    scheduled_at = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
