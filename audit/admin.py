from django.contrib import admin

from audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Browse-only; entries are written by the API"""
    list_display = ['timestamp', 'user', 'action', 'resource_type', 'resource_id', 'description']
    list_filter = ['action', 'resource_type']
    search_fields = ['description', 'user__username']
    date_hierarchy = 'timestamp'
    readonly_fields = [f.name for f in AuditLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
