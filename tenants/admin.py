from django.contrib import admin
from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['name', 'mobile', 'building', 'house_number', 'monthly_rent', 'tenant_credit', 'status']
    list_filter = ['status', 'building']
    search_fields = ['name', 'mobile', 'email', 'house_number']
    readonly_fields = ['tenant_credit', 'created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'mobile', 'email')
        }),
        ('Next of Kin', {
            'fields': ('next_of_kin_name', 'next_of_kin_mobile')
        }),
        ('House', {
            'fields': ('building', 'unit', 'house_number', 'house_size', 'area')
        }),
        ('Billing', {
            'fields': ('monthly_rent', 'default_water_bill', 'garbage_bill', 'deposit_required',
                       'deposit_paid', 'expenses', 'tenant_credit')
        }),
        ('Tenancy', {
            'fields': ('status', 'entry_date', 'leaving_date', 'created_at', 'updated_at')
        }),
    )
