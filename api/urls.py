"""
API v1 routes, mounted at /api/v1/
"""
from django.urls import path, include

urlpatterns = [
    path('', include('users.urls')),
    path('', include('buildings.urls')),
    path('', include('tenants.urls')),
    path('', include('billing.urls')),
    path('', include('maintenance.urls')),
    path('', include('reports.urls')),
    path('', include('assistant.urls')),
    path('', include('common.urls')),
    path('', include('audit.urls')),
]
