from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Dashboard users. Admins manage everything, viewers only read.
    Suspending a user (status) also clears is_active.
    """
    list_display = ['username', 'email', 'mobile', 'role', 'status', 'last_login', 'date_joined']
    list_filter = ['role', 'status', 'is_staff']
    search_fields = ['username', 'email', 'mobile']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Dashboard Access', {'fields': ('role', 'status', 'mobile')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Dashboard Access', {'fields': ('role', 'mobile')}),
    )
