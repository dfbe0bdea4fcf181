"""VaxiApp URL Configuration.

API-Routen:
    /api/health/       - Health check (core)
    /api/appointments/ - Impftermine (appointments)
"""

from django.http import HttpResponse
from django.urls import include, path


def root(request):
    """Root endpoint; a stable plain-text response that doubles as a simple healthcheck."""
    return HttpResponse("VaxiApp backend is running.")


urlpatterns = [
    path("", root, name="root"),

    # API Routes
    path("api/", include("vaxi_backend.core.urls")),
    path("api/", include("vaxi_backend.appointments.urls")),
]
