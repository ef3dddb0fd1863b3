from django.contrib import admin
from .models import MaintenanceRequest, MaintenanceExpense


class MaintenanceExpenseInline(admin.TabularInline):
    model = MaintenanceExpense
    extra = 0


@admin.register(MaintenanceRequest)
class MaintenanceRequestAdmin(admin.ModelAdmin):
    list_display = ['issue_title', 'building', 'unit', 'priority', 'status', 'cost', 'date']
    list_filter = ['status', 'priority', 'building']
    search_fields = ['issue_title', 'description', 'unit__unit_number', 'tenant__name']
    readonly_fields = ['cost', 'completed_at', 'created_at', 'updated_at']
    inlines = [MaintenanceExpenseInline]
    date_hierarchy = 'date'
