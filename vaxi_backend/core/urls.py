"""Core App URLs - Health.

Prefix: /api/
Routes:
    GET  /api/health/       - Health check (no auth)
"""

from django.urls import path

from vaxi_backend.core.views import health

app_name = 'core'

urlpatterns = [
    path('health/', health, name='health'),
]
