"""
Audit trail entries. Rows are written once and never changed.
"""
from django.db import models
from django.conf import settings
from django.core.exceptions import PermissionDenied


class AuditLogQuerySet(models.QuerySet):

    def for_resource(self, resource_type, resource_id):
        return self.filter(resource_type=resource_type, resource_id=resource_id)

    def recent(self, limit=100):
        return self.order_by('-timestamp')[:limit]


class AuditLog(models.Model):
    """Who changed what in the property records, and when"""

    ACTION_CREATE = 'CREATE'
    ACTION_UPDATE = 'UPDATE'
    ACTION_DELETE = 'DELETE'
    ACTION_LOGIN = 'LOGIN'
    ACTION_LOGOUT = 'LOGOUT'
    ACTION_PAYMENT = 'PAYMENT'
    ACTION_SETTLE = 'SETTLE'
    ACTION_PENALTY = 'PENALTY'
    ACTION_STATUS = 'STATUS'
    ACTION_NOTIFY = 'NOTIFY'

    ACTION_CHOICES = [
        (ACTION_CREATE, 'Create'),
        (ACTION_UPDATE, 'Update'),
        (ACTION_DELETE, 'Delete'),
        (ACTION_LOGIN, 'Login'),
        (ACTION_LOGOUT, 'Logout'),
        (ACTION_PAYMENT, 'Payment'),
        (ACTION_SETTLE, 'Settle Advance'),
        (ACTION_PENALTY, 'Apply Penalty'),
        (ACTION_STATUS, 'Status Change'),
        (ACTION_NOTIFY, 'Send Notification'),
    ]

    RESOURCE_BUILDING = 'Building'
    RESOURCE_UNIT = 'Unit'
    RESOURCE_STAFF = 'Staff'
    RESOURCE_UNIT_TYPE = 'BuildingUnitType'
    RESOURCE_TENANT = 'Tenant'
    RESOURCE_RECORD = 'MonthlyRecord'
    RESOURCE_PENALTY = 'Penalty'
    RESOURCE_MAINTENANCE = 'MaintenanceRequest'
    RESOURCE_USER = 'User'
    RESOURCE_SETTINGS = 'SiteSettings'

    RESOURCE_TYPE_CHOICES = [
        (RESOURCE_BUILDING, 'Building'),
        (RESOURCE_UNIT, 'Unit'),
        (RESOURCE_STAFF, 'Staff'),
        (RESOURCE_UNIT_TYPE, 'Building Unit Type'),
        (RESOURCE_TENANT, 'Tenant'),
        (RESOURCE_RECORD, 'Monthly Record'),
        (RESOURCE_PENALTY, 'Penalty'),
        (RESOURCE_MAINTENANCE, 'Maintenance Request'),
        (RESOURCE_USER, 'User'),
        (RESOURCE_SETTINGS, 'Settings'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="Admin who made the change; empty for scheduled jobs"
    )
    action = models.CharField(max_length=20, choices=ACTION_CHOICES, db_index=True)
    resource_type = models.CharField(max_length=50, choices=RESOURCE_TYPE_CHOICES, db_index=True)
    resource_id = models.IntegerField(db_index=True, null=True, blank=True)
    description = models.TextField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['resource_type', 'resource_id']),
            models.Index(fields=['action', '-timestamp']),
        ]

    def __str__(self):
        username = self.user.username if self.user else 'System'
        return f"{username} - {self.action} - {self.resource_type} #{self.resource_id}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise PermissionDenied("Audit entries cannot be changed")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Audit entries cannot be deleted")

    @property
    def user_display(self):
        if self.user:
            return self.user.get_full_name() or self.user.username
        return "System"
