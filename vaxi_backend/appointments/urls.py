"""Appointments App URLs - Vaccination appointments.

Prefix: /api/
Routes:
    GET       /api/appointments/                        - List appointments
    POST      /api/appointments/                        - Book appointment
    GET       /api/appointments/<pk>/                   - Retrieve appointment
    PUT/PATCH /api/appointments/<pk>/                   - Reschedule appointment
    GET       /api/appointments/<pk>/applications/      - Application history
"""

from django.urls import path

from vaxi_backend.appointments.views import (
    AppointmentApplicationListView,
    AppointmentDetailView,
    AppointmentListCreateView,
)

app_name = 'appointments'

urlpatterns = [
    path('appointments/', AppointmentListCreateView.as_view(), name='appointment-list'),
    path('appointments/<int:pk>/', AppointmentDetailView.as_view(), name='appointment-detail'),
    path(
        'appointments/<int:pk>/applications/',
        AppointmentApplicationListView.as_view(),
        name='appointment-applications',
    ),
]
