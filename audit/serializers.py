from rest_framework import serializers

from audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    user_display = serializers.CharField(read_only=True)
    action_display = serializers.CharField(source='get_action_display', read_only=True)
    resource_display = serializers.CharField(source='get_resource_type_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'user', 'user_display', 'action', 'action_display',
            'resource_type', 'resource_display', 'resource_id', 'description',
            'ip_address', 'metadata', 'timestamp',
        ]
        read_only_fields = fields
