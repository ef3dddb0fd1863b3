"""
URL configuration for the SmartRent API.
"""
from django.contrib import admin
from django.urls import path, include

# Import health check URLs
from common.health import get_health_urls

admin.site.site_header = "SmartRent Administration"
admin.site.site_title = "SmartRent"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('api.urls')),
]

# Add health check endpoints (for load balancers, monitoring)
urlpatterns += get_health_urls()
