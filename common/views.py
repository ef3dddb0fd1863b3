"""
General settings: company details and billing defaults
"""
from django.db import transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsActiveUser, IsAdminRole
from audit.helpers import log_action
from audit.models import AuditLog
from .models import SiteSettings
from .responses import success_response
from .serializers import SiteSettingsSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveUser])
def general_settings(request):
    return success_response(SiteSettingsSerializer(SiteSettings.load()).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
@transaction.atomic
def update_general_settings(request):
    settings_obj = SiteSettings.load()
    serializer = SiteSettingsSerializer(settings_obj, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()

    log_action(request.user, AuditLog.ACTION_UPDATE, AuditLog.RESOURCE_SETTINGS, settings_obj.pk,
               "Updated general settings", request=request, metadata={'fields': sorted(serializer.validated_data)})
    return success_response(serializer.data, "Settings updated successfully")
