from django.contrib import admin
from .models import SiteSettings


@admin.register(SiteSettings)
class SiteSettingsAdmin(admin.ModelAdmin):
    """
    Site Settings - a singleton, edit the one row instead of adding more.
    """
    list_display = ['company_name', 'company_email', 'currency_code', 'rent_due_day', 'updated_at']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Company', {
            'fields': ('company_name', 'company_email', 'company_phone', 'company_address')
        }),
        ('Notifications', {
            'fields': ('enable_sms_notifications', 'enable_email_notifications')
        }),
        ('Billing', {
            'fields': ('auto_generate_records', 'rent_due_day', 'default_garbage_bill',
                       'default_water_bill', 'currency_code')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return not SiteSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
