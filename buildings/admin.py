from django.contrib import admin
from .models import Building, UnitType, BuildingUnitType, Unit, Staff


class BuildingUnitTypeInline(admin.TabularInline):
    model = BuildingUnitType
    extra = 0


class StaffInline(admin.TabularInline):
    model = Staff
    extra = 0


@admin.register(Building)
class BuildingAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'type', 'city', 'wifi_installed', 'total_units', 'occupied_units', 'vacant_units']
    list_filter = ['type', 'city', 'wifi_installed']
    search_fields = ['name', 'code', 'city']
    readonly_fields = ['total_units', 'occupied_units', 'vacant_units']
    inlines = [BuildingUnitTypeInline, StaffInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'code', 'type', 'icon', 'city', 'address', 'wifi_installed')
        }),
        ('Statistics', {
            'fields': ('total_units', 'occupied_units', 'vacant_units'),
            'classes': ('collapse',)
        }),
    )


@admin.register(UnitType)
class UnitTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ['unit_number', 'building', 'unit_type', 'is_occupied']
    list_filter = ['building', 'is_occupied']
    search_fields = ['unit_number', 'building__name']
