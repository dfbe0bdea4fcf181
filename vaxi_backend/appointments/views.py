from rest_framework import generics, serializers, status
from rest_framework.response import Response

from vaxi_backend.core.models import AuditLog
from vaxi_backend.core.utils import log_patient_action

from .exceptions import (
	AppointmentNotFound,
	NoStockAvailable,
	PersistenceError,
	VaccinationError,
	ValidationFailed,
)
from .models import Appointment, VaccineApplication
from .permissions import AppointmentPermission
from .serializers import (
	AppointmentBookSerializer,
	AppointmentRescheduleSerializer,
	AppointmentSerializer,
	VaccineApplicationSerializer,
)
from .services.scheduling import (
	book_appointment,
	reschedule_appointment,
)


def _error_response(exc: VaccinationError) -> Response:
	"""Translate a service-layer exception into a DRF response."""
	if isinstance(exc, ValidationFailed):
		return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)
	if isinstance(exc, NoStockAvailable):
		return Response(exc.to_dict(), status=status.HTTP_409_CONFLICT)
	if isinstance(exc, AppointmentNotFound):
		return Response(exc.to_dict(), status=status.HTTP_404_NOT_FOUND)
	if isinstance(exc, PersistenceError):
		return Response(exc.to_dict(), status=status.HTTP_500_INTERNAL_SERVER_ERROR)
	return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)


def _appointment_queryset():
	return Appointment.objects.using('default').select_related(
		'patient',
		'vaccine_type',
		'guardian',
		'agent',
		'application',
		'application__agent',
		'application__lot',
		'application__lot__laboratory',
	)


class AppointmentListCreateView(generics.ListCreateAPIView):
	"""
	List and book vaccination appointments.

	POST uses the scheduling service (BookAppointment): lot reservation,
	dose computation and application creation happen atomically.
	"""
	permission_classes = [AppointmentPermission]

	def get_queryset(self):
		qs = _appointment_queryset()

		patient_id = self.request.query_params.get('patient_id')
		if patient_id:
			try:
				qs = qs.filter(patient_id=int(patient_id))
			except ValueError:
				raise serializers.ValidationError({'patient_id': 'patient_id must be an integer.'})

		return qs

	def get_serializer_class(self):
		if self.request.method == 'POST':
			return AppointmentBookSerializer
		return AppointmentSerializer

	def list(self, request, *args, **kwargs):
		log_patient_action(request.user, AuditLog.ACTION_APPOINTMENT_LIST)
		return super().list(request, *args, **kwargs)

	def create(self, request, *args, **kwargs):
		write_serializer = self.get_serializer(data=request.data)
		write_serializer.is_valid(raise_exception=True)

		try:
			appointment = book_appointment(
				data=dict(write_serializer.validated_data),
				user=request.user,
			)
		except VaccinationError as e:
			return _error_response(e)

		appointment = _appointment_queryset().get(id=appointment.id)
		read_serializer = AppointmentSerializer(appointment, context={'request': request})
		headers = self.get_success_headers(read_serializer.data)
		return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)


class AppointmentDetailView(generics.RetrieveUpdateAPIView):
	"""
	Retrieve or reschedule a vaccination appointment.

	PUT/PATCH use the scheduling service (RescheduleAppointment): the current
	application is cancelled and replaced by a new one drawn from stock.
	"""
	permission_classes = [AppointmentPermission]

	def get_queryset(self):
		return _appointment_queryset()

	def get_serializer_class(self):
		if self.request.method in ('PUT', 'PATCH'):
			return AppointmentRescheduleSerializer
		return AppointmentSerializer

	def retrieve(self, request, *args, **kwargs):
		appointment = self.get_object()
		log_patient_action(request.user, AuditLog.ACTION_APPOINTMENT_VIEW, appointment.patient_id)
		serializer = self.get_serializer(appointment)
		return Response(serializer.data)

	def update(self, request, *args, **kwargs):
		write_serializer = AppointmentRescheduleSerializer(data=request.data, context={'request': request})
		write_serializer.is_valid(raise_exception=True)

		try:
			appointment = reschedule_appointment(
				appointment_id=kwargs.get('pk'),
				data=dict(write_serializer.validated_data),
				user=request.user,
			)
		except VaccinationError as e:
			return _error_response(e)

		appointment = _appointment_queryset().get(id=appointment.id)
		read_serializer = AppointmentSerializer(appointment, context={'request': request})
		return Response(read_serializer.data, status=status.HTTP_200_OK)


class AppointmentApplicationListView(generics.ListAPIView):
	"""Every application ever created for an appointment, newest first."""
	permission_classes = [AppointmentPermission]
	serializer_class = VaccineApplicationSerializer

	def get_queryset(self):
		return (
			VaccineApplication.objects.using('default')
			.filter(appointment_id=self.kwargs.get('pk'))
			.select_related('lot', 'lot__laboratory', 'agent')
			.order_by('-created_at', '-id')
		)

	def list(self, request, *args, **kwargs):
		pk = kwargs.get('pk')
		if not Appointment.objects.using('default').filter(id=pk).exists():
			return _error_response(AppointmentNotFound(object_id=pk))
		return super().list(request, *args, **kwargs)
