"""
Audit trail API (admins only)
"""
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsAdminRole
from audit.models import AuditLog
from audit.serializers import AuditLogSerializer
from common.responses import success_response


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET admin/audit/logs?action&resourceType&resourceId&userId&limit
    GET admin/audit/logs/<id>
    """
    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        queryset = AuditLog.objects.select_related('user')
        params = self.request.query_params
        if params.get('action'):
            queryset = queryset.filter(action=params['action'].upper())
        if params.get('resourceType'):
            queryset = queryset.filter(resource_type=params['resourceType'])
        if params.get('resourceId'):
            queryset = queryset.filter(resource_id=params['resourceId'])
        if params.get('userId'):
            queryset = queryset.filter(user_id=params['userId'])
        return queryset

    def list(self, request, *args, **kwargs):
        limit = request.query_params.get('limit', '200')
        limit = int(limit) if limit.isdigit() else 200
        data = self.get_serializer(self.get_queryset().recent(limit), many=True).data
        return success_response(data, count=len(data))

    def retrieve(self, request, *args, **kwargs):
        return success_response(self.get_serializer(self.get_object()).data)
