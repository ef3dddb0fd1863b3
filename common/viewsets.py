"""
Base viewset for admin CRUD endpoints.

Wraps writes in atomic transactions, locks the row on update, records an
audit entry for every mutation and answers with the success envelope.
"""
from django.db import transaction
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from api.permissions import IsAdminRole
from audit.helpers import log_action
from audit.models import AuditLog
from common.responses import success_response, created_response


class AuditedModelViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, IsAdminRole]
    lookup_value_regex = r'\d+'
    audit_resource = None
    verbose_name = 'Record'

    def describe(self, instance):
        return str(instance)

    def audit(self, action, instance, description, **metadata):
        log_action(
            user=self.request.user,
            action=action,
            resource_type=self.audit_resource,
            resource_id=instance.pk,
            description=description,
            request=self.request,
            metadata=metadata,
        )

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        data = self.get_serializer(queryset, many=True).data
        return success_response(data, count=len(data))

    def retrieve(self, request, *args, **kwargs):
        return success_response(self.get_serializer(self.get_object()).data)

    @transaction.atomic
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        instance = self.perform_create(serializer)
        self.audit(AuditLog.ACTION_CREATE, instance, f"Created {self.verbose_name.lower()}: {self.describe(instance)}")
        return created_response(self.get_serializer(instance).data, f"{self.verbose_name} created successfully")

    @transaction.atomic
    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        instance = type(instance).objects.select_for_update().get(pk=instance.pk)
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        instance = serializer.save()
        self.audit(AuditLog.ACTION_UPDATE, instance, f"Updated {self.verbose_name.lower()}: {self.describe(instance)}",
                   fields=sorted(serializer.validated_data.keys()))
        return success_response(self.get_serializer(instance).data, f"{self.verbose_name} updated successfully")

    @transaction.atomic
    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.check_can_delete(instance)
        self.audit(AuditLog.ACTION_DELETE, instance, f"Deleted {self.verbose_name.lower()}: {self.describe(instance)}")
        instance.delete()
        return success_response(message=f"{self.verbose_name} deleted successfully")

    def perform_create(self, serializer):
        return serializer.save()

    def check_can_delete(self, instance):
        """Raise BusinessLogicError to block a delete"""
